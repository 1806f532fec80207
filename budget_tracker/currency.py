import json
import logging
import urllib.error
import urllib.request
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from budget_tracker.core.exceptions import CurrencyError
from budget_tracker.core.models import CurrencyRate

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://api.exchangerate-api.com/v4/latest"
_DEFAULT_CURRENCIES = ["USD", "RUB", "CNY", "EUR", "TRY"]


class CurrencyService:
    """Fetch tenge exchange rates and keep the last good set on disk."""

    def __init__(self, config: dict):
        cur_cfg = config.get("currency", {})
        self.base_url = cur_cfg.get("base_url", _DEFAULT_BASE_URL).rstrip("/")
        self.supported = list(cur_cfg.get("supported", _DEFAULT_CURRENCIES))
        self.timeout = float(cur_cfg.get("timeout", 10))
        self.cache_hours = float(cur_cfg.get("cache_hours", 24))
        self.cache_path = Path(config.get("rates_cache_path", "currency_rates.json"))

    def fetch_all_rates(self) -> List[CurrencyRate]:
        """Fetch every supported rate, falling back to the cache.

        Raises CurrencyError when nothing could be fetched and no cache exists.
        """
        rates: List[CurrencyRate] = []
        try:
            for code in self.supported:
                rate = self._fetch_single_rate(code)
                if rate is not None:
                    rates.append(rate)
            logger.info("Fetched %d currency rate(s)", len(rates))
        except Exception:
            logger.exception("Unexpected error while fetching currency rates")
            rates = []

        if rates:
            self.save_rates_to_cache(rates)
            return rates

        cached = self.load_rates_from_cache()
        if cached:
            logger.info("Using cached currency rates")
            return cached
        raise CurrencyError("Could not load currency rates")

    def _fetch_single_rate(self, code: str) -> Optional[CurrencyRate]:
        url = f"{self.base_url}/{code}"
        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as resp:
                status = getattr(resp, "status", 200)
                if status != 200:
                    logger.warning("HTTP %s for %s", status, code)
                    return None
                data = json.load(resp)
        except urllib.error.HTTPError as exc:
            logger.warning("HTTP %s for %s", exc.code, code)
            return None
        except (urllib.error.URLError, TimeoutError, OSError, ValueError) as exc:
            logger.warning("Failed to fetch %s rate: %s", code, exc)
            return None

        rates = data.get("rates") if isinstance(data, dict) else None
        if not rates or "KZT" not in rates:
            logger.warning("No KZT rate in response for %s", code)
            return None
        try:
            rate = CurrencyRate.from_api_response(code, data)
        except (KeyError, TypeError, ValueError, ZeroDivisionError) as exc:
            logger.warning("Malformed rate payload for %s: %s", code, exc)
            return None
        logger.debug("%s: %s", code, rate.formatted_rate)
        return rate

    def save_rates_to_cache(self, rates: List[CurrencyRate], now: datetime | None = None) -> None:
        payload = {
            "cached_at": (now or datetime.now()).isoformat(),
            "rates": [r.to_dict() for r in rates],
        }
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            logger.error("Could not write currency cache %s: %s", self.cache_path, exc)
            return
        logger.debug("Saved %d rate(s) to %s", len(rates), self.cache_path)

    def _read_cache(self) -> Optional[dict]:
        try:
            data = json.loads(self.cache_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.error("Could not read currency cache %s: %s", self.cache_path, exc)
            return None
        if not isinstance(data, dict):
            logger.error(
                "Ignoring currency cache %s: expected an object, got %s",
                self.cache_path, type(data).__name__,
            )
            return None
        return data

    def load_rates_from_cache(self) -> Optional[List[CurrencyRate]]:
        data = self._read_cache()
        if not data:
            return None
        try:
            rates = [CurrencyRate.from_dict(item) for item in data.get("rates", [])]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Corrupt currency cache %s: %s", self.cache_path, exc)
            return None
        cached_at = self.cache_time()
        if cached_at is not None:
            age = datetime.now() - cached_at
            logger.debug("Cache age: %d minute(s)", age.total_seconds() // 60)
        return rates

    def cache_time(self) -> Optional[datetime]:
        data = self._read_cache()
        if not data or not data.get("cached_at"):
            return None
        try:
            return datetime.fromisoformat(data["cached_at"])
        except (TypeError, ValueError):
            return None

    def is_cache_valid(self, now: datetime | None = None) -> bool:
        cached_at = self.cache_time()
        if cached_at is None:
            return False
        return (now or datetime.now()) - cached_at < timedelta(hours=self.cache_hours)

    def clear_cache(self) -> None:
        self.cache_path.unlink(missing_ok=True)
        logger.info("Currency cache cleared")

    def get_rates(self, refresh: bool = False) -> List[CurrencyRate]:
        """Return cached rates while they are fresh, otherwise fetch."""
        if not refresh and self.is_cache_valid():
            cached = self.load_rates_from_cache()
            if cached:
                return cached
        return self.fetch_all_rates()
