"""Exceptions raised by the icebreaker core."""

from __future__ import annotations


class IcebreakerError(Exception):
    """Base class for icebreaker failures surfaced to the HTTP layer."""


class NoPeersAvailable(IcebreakerError):
    """Raised when a guest's first assignment finds no other guests."""


class NoQuestionsAvailable(IcebreakerError):
    """Raised when a guest's first assignment finds an empty question bank."""


class NoActiveAssignment(IcebreakerError):
    """Raised when an answer is submitted without a current assignment."""


class Unauthenticated(IcebreakerError):
    """Raised when a request carries no valid guest identity."""


class ConcurrentUpdate(IcebreakerError):
    """Raised when a conditional write keeps losing to other writers."""
