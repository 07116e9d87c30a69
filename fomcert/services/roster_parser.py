"""
Roster Parser Service
Parses roster data (JSON arrays or the legacy bulleted format) into normalized records
"""

import json
import re
import logging
from typing import Any, Dict, List, Union

from fomcert.schemas.roster import RosterRecord

logger = logging.getLogger(__name__)


class RosterFormatError(ValueError):
    """Roster data could not be parsed"""


class RosterParser:
    """Utility for parsing roster data from card fields"""

    HEADER_ALIASES = {
        "name": {"name", "full name", "fullname", "graduate", "graduate name"},
        "country": {"country", "nationality"},
        "university": {"university", "school", "institution"},
        "major": {"major", "academic major", "academicmajor", "program", "course"},
        "email": {"email", "email address", "mail"},
        "phone": {"phone", "phone number", "telephone"},
        "position": {"position", "positions", "position(s) held at jicf", "role"},
        "message": {"message", "message from the graduates", "message from the graduate"},
        "picture_count": {"number of pictures", "pictures", "picture count", "picturecount", "picture_count"},
    }

    # "1. Jane Doe • USA • MIT • CS"
    LEGACY_LINE = re.compile(r"^\d+\.\s*(.+?)\s*•\s*(.+?)\s*•\s*(.+?)\s*•\s*(.+)$")

    @staticmethod
    def _normalize_header(header: str) -> str:
        if not header:
            return ""
        return " ".join(str(header).strip().lstrip("\ufeff").lower().split())

    @classmethod
    def _canonical_key(cls, header: str) -> str:
        normalized = cls._normalize_header(header)
        for key, aliases in cls.HEADER_ALIASES.items():
            if normalized in aliases:
                return key
        return ""

    @classmethod
    def normalize_record(cls, raw: Dict[str, Any]) -> RosterRecord:
        """Map arbitrary key casing onto the canonical record fields"""
        values: Dict[str, Any] = {}
        for header, value in raw.items():
            key = cls._canonical_key(header)
            if not key or key in values or value is None:
                continue
            if key == "picture_count":
                try:
                    values[key] = max(int(str(value).strip() or 0), 0)
                except ValueError:
                    values[key] = 0
                continue
            text = str(value).strip()
            if text:
                values[key] = text
        return RosterRecord(**values)

    @classmethod
    def parse_legacy(cls, text: str) -> List[RosterRecord]:
        records = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            match = cls.LEGACY_LINE.match(line)
            if not match:
                logger.debug("Skipping roster line that is not in the legacy format: %r", line)
                continue
            name, country, university, major = (part.strip() for part in match.groups())
            records.append(RosterRecord(name=name, country=country, university=university, major=major))
        return records

    @classmethod
    def parse(cls, data: Union[str, List[Any], None]) -> List[RosterRecord]:
        """
        Parse roster data into records

        Accepts a list of dicts, a JSON array string, or legacy lines
        ("N. Name • Country • University • Major").

        Raises:
            RosterFormatError: If JSON data is malformed
        """
        if data is None:
            return []

        if isinstance(data, str):
            text = data.strip()
            if not text:
                return []
            if not text.startswith("["):
                return cls.parse_legacy(text)
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise RosterFormatError(f"Roster JSON is malformed: {e}") from e

        if not isinstance(data, list):
            raise RosterFormatError("Roster data must be a list of records")

        records = []
        for item in data:
            if not isinstance(item, dict):
                raise RosterFormatError("Roster entries must be objects")
            records.append(cls.normalize_record(item))
        return records
