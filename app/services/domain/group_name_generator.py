"""
Domain service: Structured display names for finalized groups.
"""
import re


# Checked in order; multi-word names come first so they win over their parts.
# Intentionally differs from the older lookup that checked "dong" first and
# named "Mua Dong" seasons "D".
SEASON_ABBREVIATIONS = (
    ("mua dong", "MD"),
    ("mua xuan", "MX"),
    ("mua he", "MH"),
    ("mua thu", "MT"),
    ("winter", "W"),
    ("spring", "SP"),
    ("summer", "SU"),
    ("autumn", "A"),
    ("fall", "F"),
    ("dong", "D"),
    ("xuan", "X"),
    ("he", "H"),
    ("thu", "T"),
)

UNKNOWN_ABBREVIATION = "UNK"


class GroupNameGenerator:
    """
    Generates names of the form CLUSTER-SEASONYY-VARIETY-G##,
    e.g. ``CLS-W24-JAS-G01``.
    """

    def __init__(self, name_length: int = 3, season_length: int = 2):
        self.name_length = name_length
        self.season_length = season_length

    def generate_group_name(
        self,
        cluster_name: str,
        season_name: str,
        year: int,
        variety_name: str,
        group_number: int,
    ) -> str:
        """
        Build the display name for a group.

        Args:
            cluster_name: Cluster the group belongs to
            season_name: Season name (e.g. "Winter", "Mua Dong")
            year: Calendar year
            variety_name: Rice variety name
            group_number: Sequence number assigned during formation

        Returns:
            Group name
        """
        cluster_abbr = self.get_abbreviation(cluster_name, self.name_length)
        season_abbr = self.get_season_abbreviation(season_name)
        year_short = f"{year % 100:02d}"
        variety_abbr = self.get_abbreviation(variety_name, self.name_length)

        return f"{cluster_abbr}-{season_abbr}{year_short}-{variety_abbr}-G{group_number:02d}"

    @staticmethod
    def get_abbreviation(text: str, max_length: int) -> str:
        """
        Initials of a multi-word text, otherwise its leading characters.
        """
        if not text or not text.strip():
            return UNKNOWN_ABBREVIATION

        words = [w for w in re.split(r"[ \-_]", text) if w]
        if len(words) > 1:
            initials = "".join(w[0] for w in words).upper()
            return initials[:max_length]

        return text[:max_length].upper()

    def get_season_abbreviation(self, season_name: str) -> str:
        if not season_name:
            return UNKNOWN_ABBREVIATION

        lowered = season_name.lower()
        for key, abbreviation in SEASON_ABBREVIATIONS:
            if key in lowered:
                return abbreviation

        return self.get_abbreviation(season_name, self.season_length)
