"""Fund data provider backed by the public Eastmoney endpoints."""

import json
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

import requests

from fund_tracker.core.exceptions import FundDataError
from fund_tracker.core.timezone import parse_market_date, today_market
from fund_tracker.domain.views import CurrentInfo, TrailingReturns

logger = logging.getLogger(__name__)

QUOTE_URL = "https://fundgz.1234567.com.cn/js/{code}.js"
DETAIL_URL = "https://fund.eastmoney.com/pingzhongdata/{code}.js"
REFERER = "https://fund.eastmoney.com/"
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

_JSONP_RE = re.compile(r"jsonpgz\((.*)\)", re.S)
# syl_1y = 1 month, syl_3y = 3 months, syl_6y = 6 months, syl_1n = 1 year
_RETURN_VARS = {
    "return_1m": "syl_1y",
    "return_3m": "syl_3y",
    "return_6m": "syl_6y",
    "return_1y": "syl_1n",
}


def _to_decimal(raw: object) -> Optional[Decimal]:
    """Parse a provider number; blanks and garbage become None."""
    if raw is None:
        return None
    text = str(raw).strip().rstrip("%")
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def parse_quote_payload(fund_code: str, text: str) -> CurrentInfo:
    """
    Parse the fundgz JSONP body.

    An empty call (``jsonpgz();``) is how the endpoint reports an unknown
    fund; that is a not-found result, not an error.
    """
    match = _JSONP_RE.search(text)
    if not match:
        raise FundDataError(fund_code, "unrecognized quote response")
    body = match.group(1).strip()
    if not body:
        return CurrentInfo.not_found(fund_code, today_market())
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise FundDataError(fund_code, f"malformed quote payload: {exc}") from exc

    nav = _to_decimal(payload.get("dwjz"))
    if nav is None or nav <= 0:
        return CurrentInfo.not_found(fund_code, today_market())

    return CurrentInfo(
        fund_code=payload.get("fundcode") or fund_code,
        fund_name=(payload.get("name") or "").strip() or fund_code,
        current_nav=nav,
        nav_date=parse_market_date(payload.get("jzrq") or ""),
        is_valid=True,
    )


def parse_detail_script(text: str) -> TrailingReturns:
    """Extract trailing returns from the pingzhongdata script."""
    values: dict[str, Optional[Decimal]] = {}
    for field_name, var in _RETURN_VARS.items():
        match = re.search(rf'var\s+{var}\s*=\s*"([^"]*)"', text)
        values[field_name] = _to_decimal(match.group(1)) if match else None
    return TrailingReturns(**values)


class EastmoneyFundDataFetcher:
    """
    Fetches NAV quotes and trailing returns over HTTP.

    One requests.Session is shared by all worker threads; requests sessions
    are safe for concurrent GETs on independent URLs.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT, "Referer": REFERER})

    def fetch_current(self, fund_code: str) -> CurrentInfo:
        """Fetch the latest published NAV for a fund."""
        text = self._get(fund_code, QUOTE_URL.format(code=fund_code))
        return parse_quote_payload(fund_code, text)

    def fetch_trailing_returns(self, fund_code: str) -> TrailingReturns:
        """Fetch trailing returns for a fund."""
        text = self._get(fund_code, DETAIL_URL.format(code=fund_code))
        return parse_detail_script(text)

    def _get(self, fund_code: str, url: str) -> str:
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FundDataError(fund_code, f"HTTP request failed: {exc}") from exc
        response.encoding = response.encoding or "utf-8"
        logger.debug("GET %s -> %s", url, response.status_code)
        return response.text
