"""Client for the people-counting camera's counting-statistics API.

Builds the XML search request, posts it with HTTP digest authentication and
converts the XML answer into plain Python data. Failed attempts are retried
with a fixed delay up to a bounded number of attempts.
"""

import logging
import time
import xml.etree.ElementTree as ET
from datetime import date
from typing import Any, Callable

import requests
from requests.auth import HTTPDigestAuth

from peoplecount.config import DeviceConfig
from peoplecount.errors import TransportError

logger = logging.getLogger(__name__)

COUNTING_REQUEST_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<CountingStatisticsDescription>
  <statisticType>all</statisticType>
  <reportType>daily</reportType>
  <timeSpanList>
    <timeSpan>
      <startTime>{day}T00:00:00</startTime>
      <endTime>{day}T23:59:59</endTime>
    </timeSpan>
  </timeSpanList>
  <regionID>{region_id}</regionID>
</CountingStatisticsDescription>"""

XML_HEADERS = {"Content-Type": "application/xml"}


def build_counting_request(day: date, region_id: int = 1) -> str:
    """Render the counting query for one full day and region."""
    return COUNTING_REQUEST_TEMPLATE.format(day=day.isoformat(), region_id=region_id)


def _local_name(tag: str) -> str:
    # "{namespace}tag" -> "tag"
    return tag.rsplit("}", 1)[-1]


def element_to_data(element: ET.Element) -> Any:
    """Convert an XML element into dicts, lists and strings.

    Text-only elements become strings, attributes go under ``"$"`` and
    repeated child tags collapse into a list. Namespaces are dropped.
    """
    children = list(element)
    attributes = {_local_name(k): v for k, v in element.attrib.items()}
    text = (element.text or "").strip()

    if not children and not attributes:
        return text

    data: dict[str, Any] = {}
    if attributes:
        data["$"] = attributes
    if text and not children:
        data["_"] = text

    for child in children:
        key = _local_name(child.tag)
        value = element_to_data(child)
        if key in data:
            if not isinstance(data[key], list):
                data[key] = [data[key]]
            data[key].append(value)
        else:
            data[key] = value
    return data


def parse_counting_response(raw_xml: str | bytes) -> dict[str, Any]:
    """Parse the device's XML response keyed by its root element name.

    Raises:
        TransportError: If the body is not well-formed XML.
    """
    try:
        root = ET.fromstring(raw_xml)
    except ET.ParseError as e:
        raise TransportError(f"Malformed XML response: {e}") from e
    return {_local_name(root.tag): element_to_data(root)}


def fetch_counting_statistics(config: DeviceConfig, body: str) -> dict[str, Any]:
    """Send one counting query to the device.

    Args:
        config: Device address and credentials.
        body: XML request document.

    Returns:
        Parsed response data.

    Raises:
        TransportError: On network errors, non-success status or bad XML.
    """
    try:
        response = requests.post(
            config.url,
            data=body.encode("utf-8"),
            headers=XML_HEADERS,
            auth=HTTPDigestAuth(config.username, config.password),
            timeout=config.timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise TransportError(f"Counting request failed: {e}") from e

    return parse_counting_response(response.content)


def poll_counting_statistics(
    config: DeviceConfig,
    day: date,
    region_id: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, Any] | None:
    """Query the device, retrying failures with a fixed delay.

    Args:
        config: Device settings including attempt bound and delay.
        day: Day to report on.
        region_id: Counting region (defaults to config).
        sleep: Delay function, injectable for tests.

    Returns:
        Parsed statistics, or None once every attempt has failed.
    """
    body = build_counting_request(
        day, config.region_id if region_id is None else region_id
    )

    for attempt in range(1, config.max_attempts + 1):
        try:
            data = fetch_counting_statistics(config, body)
        except TransportError as e:
            logger.error("Attempt %d: %s", attempt, e.message)
            if attempt < config.max_attempts:
                sleep(config.retry_delay)
            continue

        logger.info("Counting statistics received on attempt %d", attempt)
        return data

    logger.error("Failed after %d attempts. Giving up.", config.max_attempts)
    return None
