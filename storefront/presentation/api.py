import logging
from http import HTTPStatus

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.application.check_database_health import CheckDatabaseHealthUseCase
from storefront.application.container import ApplicationContainer
from storefront.application.get_delivery_stats import GetDeliveryStatsUseCase
from storefront.application.manage_addresses import (
    AddressDTO,
    AddressUpdateDTO,
    ManageAddressesUseCase,
)
from storefront.application.sweep_delivered_orders import SweepDeliveredOrdersUseCase
from storefront.core.models import Address, DeliveryStats, SweepResult
from storefront.infrastructure.repositories import DoesNotExist
from storefront.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

bearer_scheme = HTTPBearer(auto_error=False)


class AddressCreateRequest(AddressDTO):
    pass


class AddressUpdateRequest(AddressUpdateDTO):
    pass


class AddressResponseModel(Address):
    pass


@inject
async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    unit_of_work: UnitOfWork = Depends(
        Provide[ApplicationContainer.infrastructure_container.unit_of_work]
    ),
) -> str:
    if credentials is None:
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED, detail="User not authenticated"
        )

    try:
        async with unit_of_work() as uow:
            return await uow.auth_tokens.get_user_id(credentials.credentials)
    except DoesNotExist:
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED, detail="User not authenticated"
        )


@router.get(
    "/addresses",
    status_code=HTTPStatus.OK,
    response_model=list[AddressResponseModel],
)
@inject
async def list_addresses(
    user_id: str = Depends(get_current_user_id),
    manage_addresses_use_case: ManageAddressesUseCase = Depends(
        Provide[ApplicationContainer.manage_addresses_use_case]
    ),
):
    try:
        return await manage_addresses_use_case.get_all(user_id)
    except Exception as e:
        logger.error(f"Failed to load addresses: {e}", exc_info=True)
        return JSONResponse(
            content={"error": "Failed to load addresses"},
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        )


@router.get(
    "/addresses/default",
    status_code=HTTPStatus.OK,
    response_model=AddressResponseModel,
)
@inject
async def get_default_address(
    user_id: str = Depends(get_current_user_id),
    manage_addresses_use_case: ManageAddressesUseCase = Depends(
        Provide[ApplicationContainer.manage_addresses_use_case]
    ),
):
    address = await manage_addresses_use_case.get_default(user_id)
    if address is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail="No addresses found"
        )
    return address


@router.post(
    "/addresses",
    status_code=HTTPStatus.CREATED,
    response_model=AddressResponseModel,
)
@inject
async def create_address(
    address: AddressCreateRequest,
    user_id: str = Depends(get_current_user_id),
    manage_addresses_use_case: ManageAddressesUseCase = Depends(
        Provide[ApplicationContainer.manage_addresses_use_case]
    ),
):
    try:
        return await manage_addresses_use_case.create(user_id, address)
    except Exception as e:
        logger.error(f"Failed to create address: {e}", exc_info=True)
        return JSONResponse(
            content={"error": "Failed to create address"},
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        )


@router.put(
    "/addresses",
    status_code=HTTPStatus.OK,
    response_model=AddressResponseModel,
)
@inject
async def update_address(
    changes: AddressUpdateRequest,
    address_id: int = Query(alias="id"),
    user_id: str = Depends(get_current_user_id),
    manage_addresses_use_case: ManageAddressesUseCase = Depends(
        Provide[ApplicationContainer.manage_addresses_use_case]
    ),
):
    try:
        return await manage_addresses_use_case.update(user_id, address_id, changes)
    except DoesNotExist:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail=f"Address {address_id} not found"
        )
    except Exception as e:
        logger.error(f"Failed to update address {address_id}: {e}", exc_info=True)
        return JSONResponse(
            content={"error": "Failed to update address"},
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        )


@router.delete("/addresses", status_code=HTTPStatus.OK)
@inject
async def delete_address(
    address_id: int = Query(alias="id"),
    user_id: str = Depends(get_current_user_id),
    manage_addresses_use_case: ManageAddressesUseCase = Depends(
        Provide[ApplicationContainer.manage_addresses_use_case]
    ),
):
    try:
        await manage_addresses_use_case.delete(user_id, address_id)
    except DoesNotExist:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail=f"Address {address_id} not found"
        )
    return {"success": True}


@router.post(
    "/auto-delivery",
    status_code=HTTPStatus.OK,
    response_model=SweepResult,
    dependencies=[Depends(get_current_user_id)],
)
@inject
async def run_auto_delivery(
    sweep_delivered_orders_use_case: SweepDeliveredOrdersUseCase = Depends(
        Provide[ApplicationContainer.sweep_delivered_orders_use_case]
    ),
):
    return await sweep_delivered_orders_use_case()


@router.get(
    "/auto-delivery/stats",
    status_code=HTTPStatus.OK,
    response_model=DeliveryStats,
    dependencies=[Depends(get_current_user_id)],
)
@inject
async def get_auto_delivery_stats(
    get_delivery_stats_use_case: GetDeliveryStatsUseCase = Depends(
        Provide[ApplicationContainer.get_delivery_stats_use_case]
    ),
):
    return await get_delivery_stats_use_case()


@router.get("/db-health")
@inject
async def db_health(
    check_database_health_use_case: CheckDatabaseHealthUseCase = Depends(
        Provide[ApplicationContainer.check_database_health_use_case]
    ),
):
    report = await check_database_health_use_case()
    return JSONResponse(
        content=report.model_dump(mode="json", exclude_none=True),
        status_code=HTTPStatus.OK if report.success else HTTPStatus.INTERNAL_SERVER_ERROR,
    )
