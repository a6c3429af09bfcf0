"""Chunking oracles: external services that propose a chunk manifest for a document."""

import json
import logging
import re
from typing import Any, Callable, Dict, Optional, Union

import requests
from pydantic import ValidationError

from bulkquery import config
from bulkquery.config import DEFAULT_POLICY, ChunkingPolicy
from bulkquery.domain.chunking.errors import ManifestError, OracleError
from bulkquery.domain.openai_client import complete, get_openai_client
from bulkquery.schemas import ChunkManifest

logger = logging.getLogger(__name__)

# (annotated_text, task_hint) -> manifest as a dict or as raw model output
ChunkOracle = Callable[[str, Optional[str]], Union[Dict[str, Any], str]]

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def build_chunking_rules(policy: ChunkingPolicy = DEFAULT_POLICY) -> str:
    return (
        "You analyze documents and propose section boundaries. Output a chunking manifest, "
        "never the section text itself.\n"
        "Every input line is prefixed with its number as [L<n>]. The prefix is not part of the text.\n\n"
        "Respond ONLY with a JSON object of this shape:\n"
        '{"chunks": [{"title": "<3-7 word topic>", "start": "<first 5-8 words verbatim>", '
        '"end": "<last 5-8 words verbatim>", "lines": [<first line>, <last line>], '
        '"ctx": "<context preamble or null>"}]}\n\n'
        "Boundary rules:\n"
        "1. Copy start and end anchors VERBATIM from the text, punctuation included.\n"
        "2. If an anchor phrase occurs more than once in the document, lengthen it until it is unique.\n"
        "3. Never break mid-sentence, mid-example or mid-proof, between a term and its definition, "
        "or between a question and its answer.\n"
        "4. Each section must answer: what ONE topic does this cover?\n\n"
        "Size: aim for 200-1000 tokens per section "
        f"(roughly {policy.small_words}-{policy.large_words} words), "
        f"never fewer than about {policy.small_words} or more than about {policy.hard_max_words} words.\n\n"
        "ctx: under 40 words. Define terms the section uses but does not introduce and place it "
        "within the wider document. Use null when the section stands on its own.\n\n"
        "List ALL sections, in document order, covering the whole document. Do not truncate the list, "
        "do not add commentary and do not wrap the JSON in markdown."
    )


def parse_manifest(raw: Union[Dict[str, Any], str, None]) -> ChunkManifest:
    """
    Validate an oracle response as a complete chunk manifest.

    String responses may carry stray prose around the JSON; the outermost
    `{...}` span is parsed. Anything that is not a JSON object with a `chunks`
    list of well-formed entries is rejected as a whole.

    Raises:
        ManifestError: on unparsable, truncated or mis-shaped responses.
    """
    if isinstance(raw, str):
        match = _JSON_OBJECT.search(raw)
        if not match:
            raise ManifestError("oracle response contains no JSON object")
        try:
            raw = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise ManifestError(f"oracle response is not valid JSON: {exc.msg}") from exc

    if not isinstance(raw, dict):
        raise ManifestError("oracle response must be a JSON object")
    if not isinstance(raw.get("chunks"), list):
        raise ManifestError("oracle response is missing the chunks array")

    try:
        return ChunkManifest.model_validate(raw)
    except ValidationError as exc:
        raise ManifestError(f"oracle manifest has malformed entries: {exc.error_count()} error(s)") from exc


class OpenAIChunkOracle:
    """Ask an OpenAI chat model for a chunk manifest."""

    def __init__(self, client: Any, model: str = config.CHUNKER_MODEL, policy: ChunkingPolicy = DEFAULT_POLICY):
        self.client = client
        self.model = model
        self.policy = policy

    def messages(self, annotated_text: str, task_hint: Optional[str] = None) -> list[dict[str, str]]:
        system = build_chunking_rules(self.policy)
        if task_hint:
            system += f"\n\nThe sections will later be processed with this instruction: {task_hint}"
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": annotated_text},
        ]

    def __call__(self, annotated_text: str, task_hint: Optional[str] = None) -> str:
        logger.info(
            "Chunk oracle: sending %d line(s) to OpenAI (model=%s)",
            annotated_text.count("\n") + 1,
            self.model,
        )
        try:
            return complete(
                self.client,
                self.model,
                self.messages(annotated_text, task_hint),
                json_mode=True,
            )
        except Exception as exc:
            logger.exception("Chunk oracle: OpenAI request failed")
            raise OracleError(f"OpenAI chunking request failed: {exc}") from exc


class HttpChunkOracle:
    """POST the document to a chunking service that answers with a manifest."""

    def __init__(self, url: str, api_key: Optional[str] = None, timeout: float = config.CHUNK_ORACLE_TIMEOUT):
        if not url:
            raise ValueError("chunk oracle url must be set")
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def __call__(self, annotated_text: str, task_hint: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": annotated_text}
        if task_hint:
            payload["task"] = task_hint
        try:
            response = requests.post(self.url, json=payload, headers=self._build_headers(), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.exception("Chunk oracle: request to %s failed", self.url)
            raise OracleError(f"chunk oracle request failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise ManifestError("chunk oracle response is not JSON") from exc


def default_oracle() -> Optional[ChunkOracle]:
    """Build the oracle selected by CHUNK_ORACLE, or None when none is usable."""
    backend = config.CHUNK_ORACLE
    if backend == "none":
        return None
    if backend == "http":
        if not config.CHUNK_ORACLE_URL:
            logger.warning("Chunk oracle: CHUNK_ORACLE=http but CHUNK_ORACLE_URL is not set")
            return None
        return HttpChunkOracle(config.CHUNK_ORACLE_URL, config.CHUNK_ORACLE_API_KEY)
    if backend != "openai":
        logger.warning("Chunk oracle: unknown backend %r; using local chunking", backend)
        return None
    client = get_openai_client()
    if client is None:
        return None
    return OpenAIChunkOracle(client)
