"""Site-level signal collection (robots.txt, llms.txt, IndexNow, sitemap)."""
from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from urllib.parse import urlparse

import requests

from aimapper.config.settings import settings
from aimapper.fetcher.html_fetcher import FetchResult, safe_get
from aimapper.logging import get_logger
from aimapper.metrics.record import SiteSignals

logger = get_logger(__name__)

_LASTMOD = re.compile(r"<lastmod>\s*([^<]+?)\s*</lastmod>", re.I)
_SIGNAL_FILE_LIMIT = 2 * 1024 * 1024


@dataclass
class _RobotsGroup:
    agents: list[str]
    rules: list[tuple[str, str]]


@dataclass
class RobotsInsight:
    allows_all: bool = True
    sitemaps: list[str] = field(default_factory=list)
    bingbot_allowed: bool = True
    disallow: list[str] = field(default_factory=list)


def parse_robots_txt(text: str) -> tuple[list[_RobotsGroup], list[str]]:
    """Split robots.txt into user-agent groups and collect Sitemap lines."""
    groups: list[_RobotsGroup] = []
    sitemaps: list[str] = []
    current_agents: list[str] = []
    current_rules: list[tuple[str, str]] = []

    def _flush():
        if current_agents or current_rules:
            groups.append(_RobotsGroup(current_agents[:], current_rules[:]))
            current_agents.clear()
            current_rules.clear()

    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line or ":" not in line:
            continue
        key, value = [part.strip() for part in line.split(":", 1)]
        key_lower = key.lower()
        if key_lower == "user-agent":
            if current_rules:
                _flush()
            current_agents.append(value.lower())
        elif key_lower in {"allow", "disallow"}:
            current_rules.append((key_lower, value))
        elif key_lower == "sitemap" and value:
            sitemaps.append(value)
    _flush()
    return groups, sitemaps


def _applies_to_bing(agents: list[str]) -> bool:
    return any(agent == "*" or "bingbot" in agent or "msnbot" in agent for agent in agents)


def evaluate_robots(text: str) -> RobotsInsight:
    """Summarize crawler access.

    A site allows all crawlers unless the ``*`` group disallows ``/``.
    Disallowed paths of the groups Bing obeys (bingbot, msnbot and ``*``)
    are listed in file order; Bing is blocked when one of them is ``/``.
    """
    groups, sitemaps = parse_robots_txt(text)
    allows_all = not any(
        rule_type == "disallow" and path == "/"
        for group in groups
        if "*" in group.agents
        for rule_type, path in group.rules
    )
    disallow = [
        path
        for group in groups
        if _applies_to_bing(group.agents)
        for rule_type, path in group.rules
        if rule_type == "disallow" and path
    ]
    return RobotsInsight(
        allows_all=allows_all,
        sitemaps=sitemaps,
        bingbot_allowed="/" not in disallow,
        disallow=disallow,
    )


def extract_lastmod(xml: str) -> datetime | None:
    """First ``<lastmod>`` value of a sitemap, as an aware datetime."""
    match = _LASTMOD.search(xml or "")
    if not match:
        return None
    try:
        value = datetime.fromisoformat(match.group(1))
    except ValueError:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def _origin(url: str) -> str | None:
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.hostname:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def _fetch_signal_file(url: str) -> FetchResult | None:
    """Fetch a site file, treating any failure as "unavailable"."""
    signals = settings.signals
    try:
        result = safe_get(
            url,
            timeout=signals.request_timeout,
            max_redirects=signals.max_redirects,
            max_size=_SIGNAL_FILE_LIMIT,
        )
    except (requests.RequestException, ValueError) as e:
        logger.debug("site_signal_unavailable", url=url, error=str(e))
        return None
    if not 200 <= result.status_code < 500:
        logger.debug("site_signal_unavailable", url=url, status_code=result.status_code)
        return None
    return result


def _present(result: FetchResult | None) -> bool:
    return result is not None and result.status_code < 400 and bool(result.body.strip())


def collect_site_signals(target_url: str, *, now: datetime | None = None) -> SiteSignals:
    """Gather site-wide signals for the site serving ``target_url``.

    robots.txt, llms.txt and indexnow.txt are fetched concurrently, then the
    sitemap (from robots.txt, else ``/sitemap.xml``). Never raises; anything
    unreachable is reported as absent or unknown.
    """
    origin = _origin(target_url)
    if origin is None:
        return SiteSignals()

    now = now or datetime.now(UTC)
    with ThreadPoolExecutor(max_workers=settings.signals.max_workers) as executor:
        robots_future = executor.submit(_fetch_signal_file, f"{origin}/robots.txt")
        llms_future = executor.submit(_fetch_signal_file, f"{origin}/llms.txt")
        index_now_future = executor.submit(_fetch_signal_file, f"{origin}/indexnow.txt")
        robots, llms, index_now = robots_future.result(), llms_future.result(), index_now_future.result()

    robots_allows_all = None
    bingbot_allowed = None
    bingbot_disallow: list[str] = []
    sitemap_url = f"{origin}/sitemap.xml"
    if _present(robots):
        insight = evaluate_robots(robots.body)
        robots_allows_all = insight.allows_all
        bingbot_allowed = insight.bingbot_allowed
        bingbot_disallow = insight.disallow
        if insight.sitemaps:
            sitemap_url = insight.sitemaps[0]

    sitemap_recent = None
    sitemap = _fetch_signal_file(sitemap_url)
    if _present(sitemap):
        lastmod = extract_lastmod(sitemap.body)
        if lastmod is not None:
            sitemap_recent = now - lastmod <= timedelta(days=settings.signals.sitemap_recent_days)

    signals = SiteSignals(
        llms_txt_present=_present(llms),
        robots_allows_all=robots_allows_all,
        index_now_endpoint_ok=_present(index_now),
        sitemap_lastmod_recent=sitemap_recent,
        bingbot_allowed=bingbot_allowed,
        bingbot_disallow=bingbot_disallow,
    )
    logger.info("site_signals_collected", origin=origin, **signals.to_dict())
    return signals
