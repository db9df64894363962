"""Translate provider documents into canonical entities.

Every function here is pure. Missing optional fields leave the attribute
unset; an entry missing its identity field is dropped from its sequence
instead of failing the whole document.
"""
from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any

from socialauth.core.exceptions import MalformedResponseError
from socialauth.models.entities import BirthDate, Career, Contact, Education, Feed, Position, Profile
from socialauth.utils.dates import TWITTER_DATE_FORMAT, parse_epoch_millis, parse_int, parse_timestamp

logger = logging.getLogger(__name__)


def parse_xml(content: bytes | str, endpoint: str | None = None) -> ET.Element:
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        raise MalformedResponseError(f"Failed to parse XML response: {e}", endpoint=endpoint) from e


def parse_json(content: bytes | str, endpoint: str | None = None) -> Any:
    try:
        return json.loads(content)
    except ValueError as e:
        raise MalformedResponseError(f"Failed to parse JSON response: {e}", endpoint=endpoint) from e


def element_text(element: ET.Element | None, tag: str) -> str | None:
    """Text of the first ``tag`` below ``element``; direct children win."""
    if element is None:
        return None
    node = element.find(tag)
    if node is None:
        node = element.find(f".//{tag}")
    if node is None or node.text is None:
        return None
    return node.text.strip() or None


def element_to_string(element: ET.Element) -> str:
    return ET.tostring(element, encoding="unicode")


def _joined_name(*parts: str | None) -> str | None:
    return " ".join(p for p in parts if p) or None


def _json_text(value: Any) -> str | None:
    """Scalar JSON value as text; objects, arrays and booleans are left unset."""
    if value is None or isinstance(value, (bool, dict, list)):
        return None
    return str(value)


# ---------------------------------------------------------------------------
# LinkedIn XML
# ---------------------------------------------------------------------------


def profile_from_xml(root: ET.Element, provider_id: str | None = None, save_raw: bool = False) -> Profile:
    """Build a Profile from a LinkedIn ``<person>`` document."""
    dob = None
    dob_el = root.find(".//date-of-birth")
    if dob_el is not None:
        dob = BirthDate(
            year=parse_int(element_text(dob_el, "year")),
            month=parse_int(element_text(dob_el, "month")),
            day=parse_int(element_text(dob_el, "day")),
        )

    location = None
    location_el = root.find(".//location")
    if location_el is not None:
        location = element_text(location_el, "name")

    contact_info: dict[str, str] = {}
    phones = root.find(".//phone-numbers")
    if phones is not None:
        for phone_el in phones.findall("phone-number"):
            phone_type = element_text(phone_el, "phone-type")
            number = element_text(phone_el, "phone-number")
            if phone_type and number:
                contact_info[phone_type] = number
    main_address = element_text(root, "main-address")
    if main_address:
        contact_info["main_address"] = main_address

    return Profile(
        id=element_text(root, "id"),
        first_name=element_text(root, "first-name"),
        last_name=element_text(root, "last-name"),
        email=element_text(root, "email-address"),
        profile_image_url=element_text(root, "picture-url"),
        location=location,
        dob=dob,
        contact_info=contact_info,
        provider_id=provider_id,
        raw_response=element_to_string(root) if save_raw else None,
    )


def contacts_from_xml(root: ET.Element, save_raw: bool = False) -> list[Contact]:
    """Build Contacts from a LinkedIn ``<connections>`` document, in order."""
    contacts: list[Contact] = []
    people = root.findall(".//person") if root.tag != "person" else [root]
    for person in people:
        contact_id = element_text(person, "id")
        if contact_id is None:
            # Private connections come back without an id
            continue
        contacts.append(
            Contact(
                id=contact_id,
                first_name=element_text(person, "first-name"),
                last_name=element_text(person, "last-name"),
                profile_url=element_text(person, "public-profile-url"),
                profile_image_url=element_text(person, "picture-url"),
                raw_response=element_to_string(person) if save_raw else None,
            )
        )
    logger.debug(f"Normalized {len(contacts)} of {len(people)} connections")
    return contacts


def feeds_from_xml(root: ET.Element, limit: int | None = None) -> list[Feed]:
    """Build Feeds from a LinkedIn ``<updates>`` network-updates document."""
    feeds: list[Feed] = []
    for update in root.iter("update"):
        person = update.find(".//update-content/person")
        message = None
        if person is not None:
            share = person.find("current-share")
            message = element_text(share, "comment") if share is not None else element_text(person, "current-status")
        feeds.append(
            Feed(
                created_at=parse_epoch_millis(element_text(update, "timestamp")),
                message=message,
                author_id=element_text(person, "id"),
                author_name=_joined_name(element_text(person, "first-name"), element_text(person, "last-name")),
            )
        )
        if limit is not None and len(feeds) >= limit:
            break
    return feeds


def career_from_xml(root: ET.Element) -> Career:
    """Build a Career from a LinkedIn person document with positions and educations."""
    positions = []
    for position in root.findall(".//positions/position"):
        start = position.find("start-date")
        end = position.find("end-date")
        positions.append(
            Position(
                id=element_text(position, "id"),
                title=element_text(position, "title"),
                company_name=element_text(position.find("company"), "name"),
                start_year=parse_int(element_text(start, "year")),
                start_month=parse_int(element_text(start, "month")),
                end_year=parse_int(element_text(end, "year")),
                end_month=parse_int(element_text(end, "month")),
                is_current=(element_text(position, "is-current") or "").lower() == "true",
            )
        )

    educations = []
    for education in root.findall(".//educations/education"):
        educations.append(
            Education(
                school_name=element_text(education, "school-name"),
                degree=element_text(education, "degree"),
                field_of_study=element_text(education, "field-of-study"),
                start_year=parse_int(element_text(education.find("start-date"), "year")),
                end_year=parse_int(element_text(education.find("end-date"), "year")),
            )
        )

    return Career(
        id=element_text(root, "id"),
        headline=element_text(root, "headline"),
        positions=positions,
        educations=educations,
    )


# ---------------------------------------------------------------------------
# Twitter JSON
# ---------------------------------------------------------------------------


def feeds_from_json(
    document: Any,
    limit: int | None = None,
    date_format: str = TWITTER_DATE_FORMAT,
    endpoint: str | None = None,
) -> list[Feed]:
    """Build Feeds from a Twitter ``home_timeline`` array.

    Raises:
        MalformedResponseError: If the document is not an array
    """
    if not isinstance(document, list):
        raise MalformedResponseError("Expected a JSON array of statuses", endpoint=endpoint)

    feeds: list[Feed] = []
    for item in document:
        if not isinstance(item, dict):
            continue
        user = item.get("user") if isinstance(item.get("user"), dict) else {}
        feeds.append(
            Feed(
                created_at=parse_timestamp(item.get("created_at"), date_format),
                message=_json_text(item.get("text")),
                author_id=_json_text(user.get("id_str")),
                author_name=_json_text(user.get("name")),
                screen_name=_json_text(user.get("screen_name")),
            )
        )
        if limit is not None and len(feeds) >= limit:
            break
    return feeds
