"""FastAPI dependencies.

The generation service and asset storage are resolved through dependencies
so tests can swap them with ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from product_studio.services import product_service
from product_studio.services.asset_lifecycle import AssetStorage
from product_studio.services.asset_storage import GridFSAssetStorage
from product_studio.services.generation_service import GenerationService, LLMGenerationService
from product_studio.services.session import EditingSession, get_session_store


def get_generation_service() -> GenerationService:
    return LLMGenerationService()


def get_asset_storage() -> AssetStorage:
    return GridFSAssetStorage()


async def get_session(
    product_id: str,
    generation_service: Annotated[GenerationService, Depends(get_generation_service)],
    asset_storage: Annotated[AssetStorage, Depends(get_asset_storage)],
) -> EditingSession:
    """Open (or reuse) the editing session of a product.

    Raises:
        ProductNotFoundError: If the product does not exist.
    """

    async def open_session() -> EditingSession:
        product = await product_service.get_product(product_id)
        return EditingSession(product, generation_service, asset_storage)

    return await get_session_store().open(product_id, open_session)


SessionDep = Annotated[EditingSession, Depends(get_session)]
