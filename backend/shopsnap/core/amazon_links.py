from urllib.parse import quote

AMAZON_WEB_SEARCH = "https://www.amazon.com/s?k="

# Amazon Shopping app deep link (iOS + Android): com.amazon.mobile.shopping://amazon.com/s?k=query
AMAZON_APP_SEARCH = "com.amazon.mobile.shopping://amazon.com/s?k="

# Same set of unescaped characters as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_query(query: str) -> str:
    return quote(query, safe=_URI_COMPONENT_SAFE)


def web_search_url(query: str) -> str:
    return AMAZON_WEB_SEARCH + encode_query(query)


def app_search_url(query: str) -> str:
    return AMAZON_APP_SEARCH + encode_query(query)
