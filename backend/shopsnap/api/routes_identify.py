from typing import Union

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import RedirectResponse
from starlette.datastructures import UploadFile as StarletteUploadFile

from shopsnap.core.config import Settings, get_settings
from shopsnap.core.encoding import resolve_mime_type
from shopsnap.core.errors import MissingInput
from shopsnap.core.gemini import GeminiClient, UploadedImage
from shopsnap.core.lookup import MODES, run_lookup
from shopsnap.schemas.identify import ErrorResponse, ProductsResponse, SearchLinksResponse

router = APIRouter(prefix="/api", tags=["find"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_gemini_client(settings: Settings = Depends(get_settings)) -> GeminiClient:
    return GeminiClient(
        settings.GEMINI_API_KEY,
        api_base=settings.GEMINI_API_BASE,
        timeout=settings.GEMINI_TIMEOUT_SECONDS,
    )


async def read_upload(image: Union[UploadFile, str, None] = File(None)) -> UploadedImage:
    """
    Multipart field "image" -> bytes + MIME type.
    Missing field, or a plain text value instead of a file, is a 400.
    """
    # FastAPI hands back starlette's UploadFile, so check against that class
    if not isinstance(image, StarletteUploadFile) or not image.filename:
        raise MissingInput()

    data = await image.read()
    return UploadedImage(data=data, mime_type=resolve_mime_type(image.content_type, data))


@router.post("/find", response_model=SearchLinksResponse, responses=ERROR_RESPONSES)
async def find(
    upload: UploadedImage = Depends(read_upload),
    client: GeminiClient = Depends(get_gemini_client),
    settings: Settings = Depends(get_settings),
):
    """
    Identify the product and return Amazon search links (web + app deep link).
    """
    return await run_lookup(MODES["search"], upload, client, model=settings.GEMINI_MODEL or None)


@router.post("/find/products", response_model=ProductsResponse, responses=ERROR_RESPONSES)
async def find_products(
    upload: UploadedImage = Depends(read_upload),
    client: GeminiClient = Depends(get_gemini_client),
    settings: Settings = Depends(get_settings),
):
    """
    Identify the product and return three candidate Amazon listings ({title, url}).
    """
    return await run_lookup(MODES["products"], upload, client, model=settings.GEMINI_MODEL or None)


@router.post(
    "/find/redirect",
    response_class=RedirectResponse,
    status_code=302,
    responses=ERROR_RESPONSES,
)
async def find_redirect(
    upload: UploadedImage = Depends(read_upload),
    client: GeminiClient = Depends(get_gemini_client),
    settings: Settings = Depends(get_settings),
):
    """
    Identify the product and redirect (302) straight to its Amazon page.
    """
    url = await run_lookup(MODES["redirect"], upload, client, model=settings.GEMINI_MODEL or None)
    return RedirectResponse(url=url, status_code=302)
