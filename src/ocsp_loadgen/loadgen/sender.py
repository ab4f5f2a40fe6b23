from __future__ import annotations

import base64
import logging
import random
import time
from dataclasses import dataclass, field

import httpx

from ocsp_loadgen.metrics import LatencySample, Method, Outcome
from ocsp_loadgen.ocsp import RequestPool
from ocsp_loadgen.storage import LatencyRecorder

logger = logging.getLogger(__name__)

OCSP_REQUEST_CONTENT_TYPE = "application/ocsp-request"


@dataclass(slots=True)
class Sender:
    client: httpx.AsyncClient
    pool: RequestPool
    ocsp_base: str
    recorder: LatencyRecorder
    rng: random.Random = field(default_factory=random.Random)
    timeout_sec: float | None = None

    def build(self, method: Method, payload: bytes) -> httpx.Request:
        if method is Method.GET:
            url = self.ocsp_base + base64.b64encode(payload).decode("ascii")
            return self.client.build_request("GET", url, timeout=self.timeout_sec)
        return self.client.build_request(
            "POST",
            self.ocsp_base,
            content=payload,
            headers={"Content-Type": OCSP_REQUEST_CONTENT_TYPE},
            timeout=self.timeout_sec,
        )

    async def send(self, method: Method) -> LatencySample:
        started = time.time()
        finished: float | None = None
        outcome = Outcome.ERROR
        try:
            request = self.build(method, self.pool.choose(self.rng))
            response = await self.client.send(request, stream=True)
            # stamped before the body is read, so latency covers headers only
            finished = time.time()
            outcome = await _classify(method, response)
        except httpx.HTTPError as exc:
            logger.warning("[FAILED] %s: %s", method.value, str(exc) or type(exc).__name__)
        finally:
            if finished is None:
                finished = time.time()
            sample = LatencySample(method=method, started=started, finished=finished, outcome=outcome)
            self.recorder.add(sample)
        return sample


async def _classify(method: Method, response: httpx.Response) -> Outcome:
    try:
        if response.status_code != 200:
            logger.warning("[FAILED] %s: incorrect status code %d", method.value, response.status_code)
            return Outcome.UNEXPECTED_STATUS
        try:
            await response.aread()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            logger.warning("[FAILED] %s: bad body, %s", method.value, str(exc) or type(exc).__name__)
            return Outcome.READ_ERROR
        return Outcome.GOOD
    finally:
        await response.aclose()
