import random
from typing import Dict, List, Tuple

from pydantic import BaseModel, Field

from scholarship.models import ScholarshipConfig
from scholarship.simlog import logger


class RoundPlan(BaseModel):
    """Scripted activity for one round of a simulated run."""

    round: int = Field(ge=1)
    applicants: Dict[str, str]  # account -> metadata URI, in submission order
    donations: List[Tuple[str, int]] = []
    votes: Dict[str, int] = {}  # committee member -> application id


class Primer:
    """Primer class to generate round plans for a simulated run."""

    def __init__(self, config: ScholarshipConfig):
        self.config = config

    def generate_round_plan(
        self,
        seed: int,
        round_number: int,
        num_applicants: int,
        num_donors: int,
        max_donation: int,
    ) -> RoundPlan:
        """Generates a RoundPlan for round_number from the given seed."""
        rng = random.Random(seed + round_number)  # Use isolated random instance

        applicants = {}
        for i in range(num_applicants):
            account = self._account(rng)
            applicants[account] = f"ipfs://scholarship/{round_number}/{i + 1}"

        donations = [
            (self._account(rng), rng.randint(1, max(1, max_donation)))
            for _ in range(num_donors)
        ]

        votes = {}
        if applicants:
            for member in sorted(self.config.committee):
                votes[member] = rng.randint(1, num_applicants)

        logger.info(
            f"[RoundPlan] round {round_number}: {len(applicants)} applicants, "
            f"{len(donations)} donations, {len(votes)} votes"
        )
        return RoundPlan(
            round=round_number,
            applicants=applicants,
            donations=donations,
            votes=votes,
        )

    @staticmethod
    def _account(rng: random.Random) -> str:
        return f"0x{rng.getrandbits(160):040x}"
