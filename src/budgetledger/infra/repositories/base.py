"""Shared unit-of-work handling for the SQLModel repositories."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from sqlmodel import Session

from ..database import SessionFactory, run_in_transaction

T = TypeVar("T")


class SessionBoundRepository:
    """Run repository work in the caller's session or a fresh unit of work."""

    def __init__(self, session_factory: SessionFactory, *, retries: int = 0):
        """Initialize with a session factory."""
        self.session_factory = session_factory
        self.retries = retries

    def _run(self, work: Callable[[Session], T], session: Optional[Session]) -> T:
        if session is not None:
            return work(session)
        return run_in_transaction(self.session_factory, work, retries=self.retries)
