# api.py

import asyncio
import json
import time

import aiohttp
from aiohttp import ClientResponseError

from config import Config
from exceptions import APIError, RateLimitError
from logger import logger


class RateLimiter:
    def __init__(self, rate, interval):
        self.rate = rate
        self.interval = interval
        self.allowance = rate
        self.last_check = time.time()

    async def acquire(self):
        current = time.time()
        time_passed = current - self.last_check
        self.last_check = current
        self.allowance += time_passed * (self.rate / self.interval)
        if self.allowance > self.rate:
            self.allowance = self.rate
        if self.allowance < 1:
            await asyncio.sleep(1 - self.allowance)
            self.allowance = 0
        else:
            self.allowance -= 1


class BaseAPI:
    """Shared aiohttp session handling for the tracker and chat REST clients."""

    def __init__(self, headers=None, auth=None, rate=10, interval=1):
        self.headers = headers or {}
        self.auth = auth
        self.session = None
        self.rate_limiter = RateLimiter(rate=rate, interval=interval)

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            headers=self.headers,
            auth=self.auth,
            timeout=aiohttp.ClientTimeout(total=Config.REQUEST_TIMEOUT),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self.session:
            await self.session.close()
            self.session = None

    async def _request(self, method, url, params=None, data=None):
        if self.session is None:
            raise APIError("Session is not open; use the client as an async context manager")

        for attempt in range(Config.MAX_RETRIES):
            await self.rate_limiter.acquire()
            try:
                async with self.session.request(
                    method, url, params=params, json=data
                ) as response:
                    if response.status >= 400:
                        error_body = await response.text()
                        raise ClientResponseError(
                            response.request_info,
                            response.history,
                            status=response.status,
                            message=f"{response.reason}: {error_body[:500]}",
                            headers=response.headers,
                        )
                    if response.status == 204:
                        return None
                    try:
                        return await response.json(content_type=None)
                    except json.JSONDecodeError as e:
                        # Login pages and proxy errors can arrive as HTML with a 200
                        raise APIError(
                            f"Invalid JSON response from {url} "
                            f"({response.headers.get('Content-Type', 'unknown')}): {e}",
                            status_code=response.status,
                        )
            except ClientResponseError as e:
                if e.status == 429:  # Too Many Requests
                    retry_after = float(
                        (e.headers or {}).get("Retry-After", Config.RATE_LIMIT_PAUSE)
                    )
                    logger.warning(f"Rate limited on {url}, retrying in {retry_after}s")
                    await asyncio.sleep(retry_after)
                    continue
                raise APIError(
                    f"HTTP Error: {e.status}, message='{e.message}', url='{url}'",
                    status_code=e.status,
                )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt == Config.MAX_RETRIES - 1:
                    raise APIError(
                        f"Request failed after {Config.MAX_RETRIES} attempts: {e}"
                    )
                await asyncio.sleep(Config.RATE_LIMIT_PAUSE)

        raise RateLimitError("Rate limit exceeded and max retries reached", status_code=429)

    async def get(self, url, params=None):
        return await self._request("GET", url, params=params)
