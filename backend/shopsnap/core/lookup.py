"""
The photo -> Amazon lookup pipeline.

Every endpoint runs the same steps (encode upload, ask Gemini, normalize the
answer, shape the output); a LookupMode only decides the prompt, the model,
whether Google Search grounding is on, how the answer is parsed and what the
client gets back.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from shopsnap.core.amazon_links import app_search_url, web_search_url
from shopsnap.core.errors import MalformedModelOutput, NotAnAmazonUrl
from shopsnap.core.gemini import DEFAULT_MODEL, GeminiClient, UploadedImage
from shopsnap.core.parsing import ParseResult, extract_amazon_url, parse_json_output

logger = logging.getLogger(__name__)

# Output kinds
JSON_OUTPUT = "json"
URL_OUTPUT = "url"


SEARCH_PROMPT = """Identify this product. Return ONLY a JSON object with:
- "name": the product name (brand + product + variant/flavor if visible)
- "searchQuery": optimized Amazon search query (shorter, key terms only)

Example: {"name":"Culture Pop Strawberry Rhubarb Probiotic Soda","searchQuery":"Culture Pop Strawberry Rhubarb Soda"}

Return ONLY valid JSON, no other text."""

PRODUCTS_PROMPT = """Identify the product in this image, then search Amazon for it.
Return ONLY a JSON array of exactly 3 objects, best match first, each with:
- "title": the Amazon listing title
- "url": the full Amazon product page URL (https://www.amazon.com/dp/...)

Example: [{"title":"Culture Pop Soda, Strawberry Rhubarb, 12 fl oz (Pack of 12)","url":"https://www.amazon.com/dp/B0EXAMPLE1"}]

Return ONLY valid JSON, no other text."""

REDIRECT_PROMPT = """Identify the product in this image, then search Amazon for it.
Return ONLY the full URL of the single best matching Amazon product page (https://www.amazon.com/dp/...).
No explanation, no markdown, no other text."""


def shape_search_links(info: Any) -> Dict[str, Any]:
    """
    {name, searchQuery} -> product + Amazon web / app search links.
    The links use searchQuery, or name when the model left it out.
    """
    if not isinstance(info, dict):
        raise ValueError("expected a JSON object")

    name = info.get("name")
    search_query = info.get("searchQuery")
    for field, value in (("name", name), ("searchQuery", search_query)):
        if value is not None and not isinstance(value, str):
            raise ValueError(f"'{field}' must be a string, got {type(value).__name__}")

    query = search_query or name
    if not isinstance(query, str) or not query.strip():
        raise ValueError("JSON object has neither 'searchQuery' nor 'name'")

    return {
        "product": name,
        "searchQuery": search_query,
        "amazonAppUrl": app_search_url(query),
        "amazonWebUrl": web_search_url(query),
    }


def shape_products(items: Any) -> Dict[str, Any]:
    # Relayed as-is, only wrapped
    if not isinstance(items, list):
        raise ValueError("expected a JSON array")
    return {"products": items}


def shape_redirect(url: Any) -> str:
    return url


@dataclass(frozen=True)
class LookupMode:
    name: str
    prompt: str
    output: str
    shape: Callable[[Any], Any]
    model: str = DEFAULT_MODEL
    use_search: bool = False


SEARCH = LookupMode(
    name="search",
    prompt=SEARCH_PROMPT,
    output=JSON_OUTPUT,
    shape=shape_search_links,
)

PRODUCTS = LookupMode(
    name="products",
    prompt=PRODUCTS_PROMPT,
    output=JSON_OUTPUT,
    shape=shape_products,
    use_search=True,
)

REDIRECT = LookupMode(
    name="redirect",
    prompt=REDIRECT_PROMPT,
    output=URL_OUTPUT,
    shape=shape_redirect,
    use_search=True,
)

MODES: Dict[str, LookupMode] = {m.name: m for m in (SEARCH, PRODUCTS, REDIRECT)}


def parse_model_text(mode: LookupMode, text: str) -> ParseResult:
    if mode.output == URL_OUTPUT:
        return extract_amazon_url(text)
    return parse_json_output(text)


def interpret(mode: LookupMode, text: str) -> Any:
    """
    Model answer text -> the client payload for this mode.
    Raises MalformedModelOutput / NotAnAmazonUrl carrying the raw text.
    """
    result = parse_model_text(mode, text)

    if not result.ok:
        logger.warning("[%s] could not parse model output (%s): %r", mode.name, result.error, text)
        if mode.output == URL_OUTPUT:
            raise NotAnAmazonUrl(result.error or "No Amazon URL found", raw=result.raw)
        raise MalformedModelOutput("Failed to parse product info", raw=result.raw)

    try:
        return mode.shape(result.value)
    except ValueError as e:
        logger.warning("[%s] unexpected output shape (%s): %r", mode.name, e, text)
        raise MalformedModelOutput(f"Failed to parse product info: {e}", raw=result.raw)


async def run_lookup(
    mode: LookupMode,
    image: UploadedImage,
    client: GeminiClient,
    model: Optional[str] = None,
) -> Any:
    """
    One pass of the pipeline: a single Gemini call, then interpret().
    `model` overrides the mode's default model (GEMINI_MODEL setting).
    """
    text = await client.generate(
        image,
        mode.prompt,
        model=model or mode.model,
        use_search=mode.use_search,
    )
    result = interpret(mode, text)
    logger.info("[%s] lookup result: %s", mode.name, result)
    return result
