"""
Password strength estimation with zxcvbn.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

from zxcvbn import zxcvbn

# zxcvbn scores: 0=too guessable, 1=very guessable, 2=somewhat guessable,
# 3=safely unguessable, 4=very unguessable
MAX_SCORE = 4

# zxcvbn raises on longer input
MAX_SCORED_LENGTH = 72


@dataclass
class StrengthEstimate:
    """Strength of a password as estimated by zxcvbn."""

    score: int
    warning: str = ""
    suggestions: list[str] = field(default_factory=list)
    crack_time: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "warning": self.warning,
            "suggestions": self.suggestions,
            "crack_time": self.crack_time,
        }


class StrengthScorer:
    """Heuristic strength scorer.

    ``user_inputs`` are strings identifying the user (email local part,
    name) that zxcvbn penalises when they appear in the password.
    Only the first MAX_SCORED_LENGTH characters are scored.
    """

    def score(
        self,
        password: str,
        user_inputs: Sequence[str] | None = None,
    ) -> StrengthEstimate:
        inputs = [s[:MAX_SCORED_LENGTH] for s in (user_inputs or []) if s]
        result = zxcvbn(password[:MAX_SCORED_LENGTH], user_inputs=inputs)

        feedback = result.get("feedback") or {}
        return StrengthEstimate(
            score=result["score"],
            warning=feedback.get("warning") or "",
            suggestions=list(feedback.get("suggestions") or []),
            crack_time=str(
                result["crack_times_display"].get(
                    "offline_slow_hashing_1e4_per_second", "unknown"
                )
            ),
        )
