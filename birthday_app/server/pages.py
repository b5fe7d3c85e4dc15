"""HTML served by the API server: login forms and the guest icebreaker page."""

from __future__ import annotations

from html import escape

_LOGIN_STYLE = """
      body { font-family: Arial, sans-serif; display: flex; justify-content: center; align-items: center; min-height: 100vh; margin: 0; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }
      .login-container { background: white; padding: 40px; border-radius: 10px; box-shadow: 0 10px 25px rgba(0,0,0,0.2); width: 100%; max-width: 400px; }
      h1 { margin: 0 0 30px 0; color: #333; text-align: center; }
      .error { background: #fee; color: #c33; padding: 10px; border-radius: 5px; margin-bottom: 20px; text-align: center; }
      .form-group { margin-bottom: 20px; }
      label { display: block; margin-bottom: 5px; color: #555; font-weight: bold; }
      input { width: 100%; padding: 12px; border: 1px solid #ddd; border-radius: 5px; font-size: 16px; box-sizing: border-box; }
      button { width: 100%; padding: 12px; background: #667eea; color: white; border: none; border-radius: 5px; font-size: 16px; font-weight: bold; cursor: pointer; }
      button:hover { background: #5568d3; }
"""

_ERROR_BANNER = '<div class="error">Invalid credentials. Please try again.</div>'


def _page(title: str, body: str) -> str:
    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{escape(title)}</title>
    <style>{_LOGIN_STYLE}</style>
  </head>
  <body>
{body}
  </body>
</html>"""


def login_page(redirect: str, with_error: bool = False) -> str:
    """Shared-password form guarding the invitation."""
    body = f"""    <div class="login-container">
      <h1>&#127874; Birthday Invitation</h1>
      {_ERROR_BANNER if with_error else ''}
      <form method="POST" action="/login">
        <input type="hidden" name="redirect" value="{escape(redirect, quote=True)}" />
        <div class="form-group">
          <label for="password">Password</label>
          <input type="password" id="password" name="password" required autofocus autocomplete="current-password" />
        </div>
        <button type="submit">Enter</button>
      </form>
    </div>"""
    return _page("Login - Birthday Pages", body)


def guest_login_page(redirect: str, with_error: bool = False) -> str:
    """Per-guest login form for the icebreaker."""
    body = f"""    <div class="login-container">
      <h1>&#127874; Guest Login</h1>
      {_ERROR_BANNER if with_error else ''}
      <form method="POST" action="/guest-login">
        <input type="hidden" name="redirect" value="{escape(redirect, quote=True)}" />
        <div class="form-group">
          <label for="name">Guest Name</label>
          <input type="text" id="name" name="name" required autofocus autocomplete="username" />
        </div>
        <div class="form-group">
          <label for="password">Password</label>
          <input type="password" id="password" name="password" required autocomplete="current-password" />
        </div>
        <button type="submit">Login</button>
      </form>
    </div>"""
    return _page("Guest Login - Birthday Pages", body)


ICEBREAKER_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Icebreaker - Birthday Pages</title>
    <style>
      body { font-family: Arial, sans-serif; margin: 0; padding: 1.5rem; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); min-height: 100vh; display: flex; flex-direction: column; gap: 1rem; align-items: center; }
      .card { background: #fff; color: #333; border-radius: 10px; padding: 1.5rem; width: 100%; max-width: 36rem; box-sizing: border-box; box-shadow: 0 10px 25px rgba(0,0,0,0.2); }
      .hidden { display: none; }
      textarea { width: 100%; min-height: 6rem; padding: 0.75rem; border: 1px solid #ddd; border-radius: 5px; font-size: 1rem; box-sizing: border-box; }
      button { margin-top: 0.75rem; padding: 0.75rem 1.5rem; background: #667eea; color: #fff; border: none; border-radius: 5px; font-size: 1rem; font-weight: bold; cursor: pointer; }
      button:disabled { opacity: 0.6; cursor: not-allowed; }
      table { width: 100%; border-collapse: collapse; }
      td, th { padding: 0.4rem; text-align: left; border-bottom: 1px solid #eee; }
      #status { min-height: 1.25rem; color: #c33; }
    </style>
  </head>
  <body>
    <section class="card" id="assignment-card">
      <h2 id="assignment-title">Loading your next question&hellip;</h2>
      <div id="question"></div>
      <form id="answer-form" class="hidden">
        <textarea id="answer" required></textarea>
        <button type="submit" id="submit-button">Send answer</button>
      </form>
      <p id="status"></p>
    </section>
    <section class="card">
      <h2>Leaderboard</h2>
      <table>
        <thead><tr><th>Guest</th><th>Guests talked to</th><th>Answers</th></tr></thead>
        <tbody id="leaderboard"></tbody>
      </table>
    </section>
    <script>
      const title = document.getElementById('assignment-title');
      const question = document.getElementById('question');
      const form = document.getElementById('answer-form');
      const answer = document.getElementById('answer');
      const submitButton = document.getElementById('submit-button');
      const statusEl = document.getElementById('status');
      const leaderboard = document.getElementById('leaderboard');

      function render(payload) {
        if (payload.completed) {
          title.textContent = 'All done!';
          question.textContent = payload.message || '';
          form.classList.add('hidden');
          return;
        }
        title.textContent = `About ${payload.currentGuest}`;
        question.innerHTML = payload.currentQuestionHtml || '';
        answer.value = '';
        form.classList.remove('hidden');
      }

      async function handle(response) {
        const body = await response.json().catch(() => ({}));
        if (response.status === 401) {
          window.location.href = '/guest-login?redirect=/icebreaker';
          return null;
        }
        if (!response.ok) {
          statusEl.textContent = body.detail || 'Something went wrong.';
          return null;
        }
        statusEl.textContent = '';
        return body;
      }

      async function loadAssignment() {
        const body = await handle(await fetch('/api/icebreaker/assignment'));
        if (body) render(body);
      }

      async function loadLeaderboard() {
        const rows = await handle(await fetch('/api/icebreaker/leaderboard'));
        if (!rows) return;
        leaderboard.innerHTML = '';
        rows.forEach(row => {
          const tr = document.createElement('tr');
          [row.name, row.guestsTalkedTo, row.totalAnswered].forEach(value => {
            const td = document.createElement('td');
            td.textContent = value;
            tr.appendChild(td);
          });
          leaderboard.appendChild(tr);
        });
      }

      form.addEventListener('submit', async event => {
        event.preventDefault();
        submitButton.disabled = true;
        const body = await handle(await fetch('/api/icebreaker/answer', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({ answer: answer.value })
        }));
        submitButton.disabled = false;
        if (body) {
          render(body);
          loadLeaderboard();
        }
      });

      loadAssignment();
      loadLeaderboard();
      setInterval(loadLeaderboard, 15000);
    </script>
  </body>
</html>
"""
