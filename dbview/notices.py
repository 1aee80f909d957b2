"""User-facing failure notices."""

from dataclasses import dataclass, field
from enum import Enum


class NoticeStyle(str, Enum):
    """How a notice is presented."""

    ALERT = "alert"  # Blocking, acknowledged once
    INLINE = "inline"  # Shown in place until superseded
    MODAL = "modal"  # Dismissible dialog


@dataclass
class Notice:
    """A single failure message scoped to the action that caused it."""

    action: str
    message: str
    style: NoticeStyle = NoticeStyle.ALERT
    detail: str | None = None
    dismissed: bool = False

    def __str__(self) -> str:
        text = f"{self.style.value.upper()}: {self.action} - {self.message}"
        if self.detail:
            text += f" ({self.detail})"
        return text


@dataclass
class NoticeLog:
    """Notices raised during a session, oldest first."""

    notices: list[Notice] = field(default_factory=list)

    @property
    def active(self) -> list[Notice]:
        """Notices not yet dismissed."""
        return [n for n in self.notices if not n.dismissed]

    @property
    def has_active(self) -> bool:
        return len(self.active) > 0

    def post(
        self,
        action: str,
        message: str,
        style: NoticeStyle = NoticeStyle.ALERT,
        detail: str | None = None,
    ) -> Notice:
        """Record a notice and return it."""
        notice = Notice(action=action, message=message, style=style, detail=detail)
        self.notices.append(notice)
        return notice

    def for_action(self, action: str) -> list[Notice]:
        """Active notices raised by one action."""
        return [n for n in self.active if n.action == action]

    def dismiss(self, notice: Notice) -> None:
        notice.dismissed = True

    def dismiss_all(self) -> None:
        for notice in self.notices:
            notice.dismissed = True

    def clear(self) -> None:
        self.notices.clear()
