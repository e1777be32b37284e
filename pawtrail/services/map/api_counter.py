"""
API Call Counter - Simple call limiting implementation
"""
from datetime import date
from typing import Dict

from pawtrail.errors import CollaboratorError


class APICounter:
    """API call counter, owned by the collaborator that makes the calls"""

    def __init__(self, max_calls_per_day: int):
        self.max_calls_per_day = max_calls_per_day
        self.call_count: Dict[str, int] = {}
        self.current_date = date.today()

    def _today_key(self) -> str:
        today = date.today()

        # Reset counter if date changes
        if today != self.current_date:
            self.call_count.clear()
            self.current_date = today

        return today.isoformat()

    def can_make_call(self) -> bool:
        """Check if API can be called"""
        return self.call_count.get(self._today_key(), 0) < self.max_calls_per_day

    def check(self, collaborator: str) -> None:
        if not self.can_make_call():
            raise CollaboratorError(
                f"API call limit exceeded. Max calls per day: {self.max_calls_per_day}",
                collaborator=collaborator,
            )

    def record_call(self) -> None:
        """Record one API call"""
        today_key = self._today_key()
        self.call_count[today_key] = self.call_count.get(today_key, 0) + 1

    def get_remaining_calls(self) -> int:
        """Get remaining call count"""
        current_calls = self.call_count.get(self._today_key(), 0)
        return max(0, self.max_calls_per_day - current_calls)
