import re
from place_search.models import ParsedIntent

US_STATES = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR",
    "california": "CA", "colorado": "CO", "connecticut": "CT", "delaware": "DE",
    "florida": "FL", "georgia": "GA", "hawaii": "HI", "idaho": "ID",
    "illinois": "IL", "indiana": "IN", "iowa": "IA", "kansas": "KS",
    "kentucky": "KY", "louisiana": "LA", "maine": "ME", "maryland": "MD",
    "massachusetts": "MA", "michigan": "MI", "minnesota": "MN", "mississippi": "MS",
    "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK",
    "oregon": "OR", "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC",
    "south dakota": "SD", "tennessee": "TN", "texas": "TX", "utah": "UT",
    "vermont": "VT", "virginia": "VA", "washington": "WA", "west virginia": "WV",
    "wisconsin": "WI", "wyoming": "WY",
}
US_STATE_ABBREVS = set(US_STATES.values())


class IntentParser:
    """
    Lightweight intent extraction for place queries.

    Recognizes "near me", a trailing state (code or full name) and an
    "<what> in|near <where>" locality, removing each from the query.
    """

    NEAR_ME = re.compile(r"\bnear\s+me\b", re.IGNORECASE)
    TRAILING_CODE = re.compile(r"(.+?)\s+([A-Za-z]{2})")
    LOCALITY = re.compile(r"(.+?)\s+(?:in|near)\s+(.+)", re.IGNORECASE)

    # Longest names first so "west virginia" is not read as "virginia".
    STATE_NAMES = sorted(US_STATES, key=len, reverse=True)

    def parse(self, raw: str) -> ParsedIntent:
        q = (raw or "").strip()
        near_me = False
        locality = None
        region = None

        # 1. "coffee near me"
        if self.NEAR_ME.search(q):
            near_me = True
            q = self.NEAR_ME.sub("", q, count=1).strip()

        # 2. "pizza miami FL"
        state_match = self.TRAILING_CODE.fullmatch(q)
        if state_match:
            code = state_match.group(2).upper()
            if code in US_STATE_ABBREVS:
                region = code
                q = state_match.group(1).strip()

        # 3. "pizza in florida"
        if region is None:
            region, q = self._strip_state_name(q)

        # 4. "tacos in austin", "bbq near downtown"
        city_match = self.LOCALITY.fullmatch(q)
        if city_match:
            q = city_match.group(1).strip()
            locality = city_match.group(2).strip()

        return ParsedIntent(
            clean_query=q, near_me=near_me, locality=locality, region=region
        )

    def _strip_state_name(self, q: str):
        lower = q.lower()
        for name in self.STATE_NAMES:
            if not lower.endswith(name):
                continue
            head = q[: -len(name)]
            if head and not head[-1].isspace():
                continue
            return US_STATES[name], head.strip()
        return None, q


intent_parser = IntentParser()
