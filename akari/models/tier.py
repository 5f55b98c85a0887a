from bisect import bisect_right
from typing import Optional
from pydantic import BaseModel


class Tier(BaseModel):
    """Banda de tier: rango de puntos acumulados"""

    name: str  # Seeker | Alchemist | Sentinel | Merchant | Guardian | Sovereign
    level: int
    min_points: int
    max_points: Optional[int] = None  # None en el tier más alto
    badge_emoji: str

    @property
    def key(self) -> str:
        """Formato guardado en el usuario: Seeker_L1, Sentinel_L3, ..."""
        return f"{self.name}_L{self.level}"


# Bandas ordenadas de menor a mayor umbral
TIERS: list[Tier] = [
    Tier(name="Seeker", level=1, min_points=0, max_points=333, badge_emoji="🧭"),
    Tier(name="Seeker", level=2, min_points=334, max_points=666, badge_emoji="🧭"),
    Tier(name="Seeker", level=3, min_points=667, max_points=999, badge_emoji="🧭"),
    Tier(name="Alchemist", level=1, min_points=1000, max_points=2333, badge_emoji="🔥"),
    Tier(name="Alchemist", level=2, min_points=2334, max_points=3666, badge_emoji="🔥"),
    Tier(name="Alchemist", level=3, min_points=3667, max_points=4999, badge_emoji="🔥"),
    Tier(name="Sentinel", level=1, min_points=5000, max_points=8750, badge_emoji="🛡️"),
    Tier(name="Sentinel", level=2, min_points=8751, max_points=12500, badge_emoji="🛡️"),
    Tier(name="Sentinel", level=3, min_points=12501, max_points=16250, badge_emoji="🛡️"),
    Tier(name="Sentinel", level=4, min_points=16251, max_points=19999, badge_emoji="🛡️"),
    Tier(name="Merchant", level=1, min_points=20000, max_points=30000, badge_emoji="💰"),
    Tier(name="Merchant", level=2, min_points=30001, max_points=40000, badge_emoji="💰"),
    Tier(name="Merchant", level=3, min_points=40001, max_points=49999, badge_emoji="💰"),
    Tier(name="Guardian", level=1, min_points=50000, max_points=66666, badge_emoji="⚔️"),
    Tier(name="Guardian", level=2, min_points=66667, max_points=83333, badge_emoji="⚔️"),
    Tier(name="Guardian", level=3, min_points=83334, max_points=99999, badge_emoji="⚔️"),
    Tier(name="Sovereign", level=1, min_points=100000, max_points=None, badge_emoji="👑"),
]

_THRESHOLDS = [t.min_points for t in TIERS]


def tier_for_points(points: float) -> Tier:
    """
    Tier que corresponde a un saldo de puntos.

    Es la banda anterior al primer umbral que el saldo no alcanza; por encima
    del último umbral es el tier más alto. Sin histéresis.
    """
    index = bisect_right(_THRESHOLDS, points) - 1
    return TIERS[max(index, 0)]
