"""Renders an election data snapshot as a plain-text briefing for the LLM."""

from collections import Counter
from typing import Any, Optional

from ..models import ElectionDataSnapshot
from .data_loader import (
    ALLIANCE_PERFORMANCE,
    CONSTITUENCIES_MASTER,
    CONSTITUENCIES_SUMMARY,
    ELECTION_COMPLETE,
    ELECTOR_DETAILS,
    PARTY_PERFORMANCE,
    SEAT_ANALYSIS,
    TURNOUT_ANALYSIS,
    WINNER_ANALYSIS,
)

FALLBACK_CONTEXT = "No specific election data available."

# Caps for long collections, to keep the prompt bounded.
MAX_CONSTITUENCIES_PER_REGION = 10
MAX_PARTIES = 8
MAX_ALLIANCE_REGIONS = 6
MAX_KEY_SEATS = 5
MAX_WINNING_PARTIES = 8

PERFORMANCE_YEARS = ("2020", "2015", "2010")


def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _pct(value: Any) -> str:
    return f"{_number(value):.1f}"


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


class ContextFormatter:
    """Pure, deterministic snapshot -> text renderer.

    Each dataset gets its own section; sections for datasets that are
    missing from the snapshot are skipped.
    """

    def format(self, snapshot: Optional[ElectionDataSnapshot]) -> str:
        if snapshot is None or snapshot.is_empty:
            return FALLBACK_CONTEXT

        sections = [
            self._election_overview(snapshot.get(ELECTION_COMPLETE)),
            self._constituencies(snapshot.get(CONSTITUENCIES_MASTER)),
            self._party_performance(snapshot.get(PARTY_PERFORMANCE)),
            self._alliance_performance(snapshot.get(ALLIANCE_PERFORMANCE)),
            self._turnout(snapshot.get(TURNOUT_ANALYSIS)),
            self._winners(snapshot.get(WINNER_ANALYSIS)),
            self._seat_analysis(snapshot.get(SEAT_ANALYSIS)),
            self._electors(snapshot.get(ELECTOR_DETAILS)),
            self._seat_distribution(snapshot.get(CONSTITUENCIES_SUMMARY)),
        ]

        formatted = "BIHAR ELECTION DATA 2025:\n\n"
        formatted += "".join(section for section in sections if section)

        if snapshot.data_types:
            formatted += f"Data Sources: {', '.join(snapshot.data_types)}\n"
        if snapshot.loaded_at:
            formatted += f"Data Last Loaded: {snapshot.loaded_at}\n"

        return formatted

    def _election_overview(self, data: Any) -> str:
        data = _dict(data)
        if not data:
            return ""

        lines = []
        election = _dict(data.get("election"))
        if election:
            lines.append(f"Election: {election.get('name')}")
            lines.append(f"State: {election.get('state')}")
            lines.append(f"Total Constituencies: {election.get('total_constituencies')}")
            lines.append(f"Type: {election.get('type')}")

        schedule = _dict(data.get("schedule"))
        if schedule:
            lines.append("")
            lines.append("Election Schedule:")
            lines.append(f"Announcement Date: {schedule.get('announcement_date')}")
            for phase in _list(schedule.get("phases")):
                phase = _dict(phase)
                lines.append(
                    f"Phase {phase.get('phase_number')}: {phase.get('polling_date')} "
                    f"({phase.get('polling_day')}) - {phase.get('constituencies_count')} constituencies"
                )
            lines.append(
                f"Vote Counting: {schedule.get('counting_date')} ({schedule.get('counting_day')})"
            )

        voter_info = _dict(data.get("voter_information"))
        if voter_info:
            lines.append("")
            lines.append("Voter Information:")
            lines.append(f"Total Seats: {voter_info.get('total_seats')}")
            lines.append(f"Polling Hours: {voter_info.get('polling_hours')}")
            lines.append(f"ID Required: {'Yes' if voter_info.get('identification_required') else 'No'}")
            reserved = _dict(voter_info.get("reserved_seats"))
            if reserved:
                lines.append(f"Reserved Seats - SC: {reserved.get('scheduled_caste')}")
                lines.append(f"Reserved Seats - ST: {reserved.get('scheduled_tribe')}")
                lines.append(f"General Seats: {reserved.get('general')}")

        return "\n".join(lines) + "\n\n"

    def _constituencies(self, data: Any) -> str:
        constituencies = _list(_dict(data).get("constituencies"))
        if not constituencies:
            return ""

        # Insertion order of regions follows the dataset order
        regions: dict[str, list[dict]] = {}
        for constituency in constituencies:
            constituency = _dict(constituency)
            region = constituency.get("region_name") or "Unknown"
            regions.setdefault(region, []).append(constituency)

        formatted = "CONSTITUENCY INFORMATION:\n"
        formatted += f"Total Constituencies: {data.get('total_constituencies', len(constituencies))}\n\n"

        for region, members in regions.items():
            formatted += f"{region} Region ({len(members)} constituencies):\n"
            for constituency in members[:MAX_CONSTITUENCIES_PER_REGION]:
                formatted += (
                    f"  AC-{constituency.get('ac_number')}: {constituency.get('ac_name')} "
                    f"(Currently held by: {constituency.get('held_party')})\n"
                )
            if len(members) > MAX_CONSTITUENCIES_PER_REGION:
                formatted += f"  ... and {len(members) - MAX_CONSTITUENCIES_PER_REGION} more constituencies\n"
            formatted += "\n"

        return formatted

    def _party_performance(self, data: Any) -> str:
        parties = _list(_dict(data).get("parties"))
        if not parties:
            return ""

        formatted = "PARTY PERFORMANCE (2010-2020):\n"
        for party in parties[:MAX_PARTIES]:
            party = _dict(party)
            name = party.get("party_name")
            if not name or name in ("Total", "OTH"):
                continue
            formatted += f"{name}:\n"
            for year in PERFORMANCE_YEARS:
                performance = _dict(party.get(f"performance_{year}"))
                formatted += (
                    f"  {year}: {performance.get('seats_won') or 0} seats won "
                    f"({_pct(performance.get('vote_share'))}% votes)\n"
                )
        return formatted + "\n"

    def _alliance_performance(self, data: Any) -> str:
        regional = _dict(_dict(data).get("regional_analysis"))
        if not regional:
            return ""

        formatted = "ALLIANCE PERFORMANCE BY REGION:\n"
        regions_2020 = _list(regional.get("2020"))
        if regions_2020:
            formatted += "2020 Election - Regional Breakdown:\n"
            for region in regions_2020[:MAX_ALLIANCE_REGIONS]:
                region = _dict(region)
                name = region.get("region")
                if not name or name == "Region New":
                    continue
                formatted += (
                    f"  {name}: NDA {region.get('nda_seats')} seats ({_pct(region.get('nda_vote_share'))}%), "
                    f"MGB {region.get('mgb_seats')} seats ({_pct(region.get('mgb_vote_share'))}%)\n"
                )
        return formatted + "\n"

    def _turnout(self, data: Any) -> str:
        constituencies = [_dict(c) for c in _list(_dict(data).get("constituencies"))]
        if not constituencies:
            return ""

        totals = [
            _number(_dict(c.get("turnout_2020")).get("total"))
            for c in constituencies
            if c.get("turnout_2020")
        ]
        formatted = "VOTER TURNOUT:\n"
        formatted += f"Constituencies Covered: {len(constituencies)}\n"
        if totals:
            formatted += f"Average 2020 Turnout: {sum(totals) / len(totals):.1f}%\n"
        return formatted + "\n"

    def _winners(self, data: Any) -> str:
        constituencies = [_dict(c) for c in _list(_dict(data).get("constituencies"))]
        parties = Counter(
            _dict(c.get("winner_2020")).get("party")
            for c in constituencies
            if _dict(c.get("winner_2020")).get("party")
        )
        if not parties:
            return ""

        ranked = sorted(parties.items(), key=lambda item: (-item[1], item[0]))
        formatted = "2020 WINNERS BY PARTY:\n"
        for party, seats in ranked[:MAX_WINNING_PARTIES]:
            formatted += f"{party}: {seats} seats\n"
        return formatted + "\n"

    def _seat_analysis(self, data: Any) -> str:
        seats = [_dict(s) for s in _list(_dict(data).get("constituencies"))]
        if not seats:
            return ""

        def of_type(kind: str) -> list[dict]:
            return [s for s in seats if kind in str(s.get("seat_type") or "").lower()]

        strongholds = of_type("stronghold")
        swings = of_type("swing")

        formatted = "SEAT ANALYSIS:\n"
        formatted += f"Stronghold Seats: {len(strongholds)}\n"
        formatted += f"Swing Seats: {len(swings)}\n"

        if strongholds:
            formatted += "\nKey Stronghold Seats:\n"
            for seat in strongholds[:MAX_KEY_SEATS]:
                formatted += f"  {seat.get('ac_name')}: {seat.get('stronghold_party')} stronghold\n"

        if swings:
            formatted += "\nKey Swing Seats to Watch:\n"
            for seat in swings[:MAX_KEY_SEATS]:
                formatted += f"  {seat.get('ac_name')}: {seat.get('competitiveness')} competitiveness\n"

        return formatted + "\n"

    def _electors(self, data: Any) -> str:
        data = _dict(data)
        constituencies = [_dict(c) for c in _list(data.get("constituencies"))]
        if not constituencies:
            return ""

        post = sum(int(_number(c.get("post_revision_electors"))) for c in constituencies)
        pre = sum(int(_number(c.get("pre_revision_electors"))) for c in constituencies)

        formatted = "ELECTOR DETAILS:\n"
        if data.get("reference_date"):
            formatted += f"Reference Date: {data.get('reference_date')}\n"
        formatted += f"Total Electors (post revision): {post:,}\n"
        formatted += f"Total Electors (pre revision): {pre:,}\n"
        return formatted + "\n"

    def _seat_distribution(self, data: Any) -> str:
        rows = [_dict(r) for r in _list(data)]
        if not rows:
            return ""

        holdings = Counter(row.get("Held_Party") or "Unknown" for row in rows)
        formatted = "CURRENT SEAT DISTRIBUTION:\n"
        for party, count in sorted(holdings.items(), key=lambda item: (-item[1], item[0])):
            formatted += f"{party}: {count} seats\n"
        return formatted + "\n"
