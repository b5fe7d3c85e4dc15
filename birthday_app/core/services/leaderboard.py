"""Derives rankings and shared answers from all guests' progress records."""

from __future__ import annotations

from collections.abc import Mapping

from birthday_app.core.models import LeaderboardRow, PeerAnswer, ProgressRecord


def compute_leaderboard(
    guest_names: list[str],
    records: Mapping[str, ProgressRecord],
) -> list[LeaderboardRow]:
    """Rank guests by distinct peers answered about, then by total answers."""
    rows: list[LeaderboardRow] = []
    for name in guest_names:
        record = records.get(name)
        answers = record.answers if record is not None else {}
        rows.append(
            LeaderboardRow(
                name=name,
                guests_talked_to=len(answers),
                total_answered=sum(len(by_question) for by_question in answers.values()),
            )
        )
    return sorted(rows, key=lambda row: (-row.guests_talked_to, -row.total_answered))


def answers_about(
    target: str,
    guest_names: list[str],
    records: Mapping[str, ProgressRecord],
) -> dict[str, list[PeerAnswer]]:
    """Group every answer given about ``target`` by question id."""
    grouped: dict[str, list[PeerAnswer]] = {}
    for name in guest_names:
        if name == target:
            continue
        record = records.get(name)
        if record is None:
            continue
        for question_id, answer in record.answers.get(target, {}).items():
            grouped.setdefault(question_id, []).append(PeerAnswer(answered_by=name, answer=answer))
    return grouped
