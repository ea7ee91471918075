from storefront.core.models import Address
from storefront.infrastructure.repositories import AddressRepository
from storefront.infrastructure.unit_of_work import UnitOfWork


class AddressDTO(AddressRepository.CreateDTO):
    pass


class AddressUpdateDTO(AddressRepository.UpdateDTO):
    pass


class ManageAddressesUseCase:
    """Address book of a single user. Keeps at most one default address per user."""

    def __init__(self, unit_of_work: UnitOfWork):
        self._unit_of_work = unit_of_work

    async def get_all(self, user_id: str) -> list[Address]:
        async with self._unit_of_work() as uow:
            return await uow.addresses.list_for_user(user_id)

    async def get_default(self, user_id: str) -> Address | None:
        addresses = await self.get_all(user_id)
        return next(
            (address for address in addresses if address.is_default),
            addresses[0] if addresses else None,
        )

    async def create(self, user_id: str, address: AddressDTO) -> Address:
        async with self._unit_of_work() as uow:
            data = AddressRepository.CreateDTO(**address.model_dump())
            if await uow.addresses.count_for_user(user_id) == 0:
                data.is_default = True
            if data.is_default:
                await uow.addresses.clear_default(user_id)

            created = await uow.addresses.create(user_id, data)
            await uow.commit()
            return created

    async def update(
        self, user_id: str, address_id: int, changes: AddressUpdateDTO
    ) -> Address:
        async with self._unit_of_work() as uow:
            # Raises DoesNotExist for addresses of other users
            await uow.addresses.get(user_id, address_id)

            if changes.is_default:
                await uow.addresses.clear_default(user_id, keep_id=address_id)

            await uow.addresses.update(
                user_id,
                address_id,
                AddressRepository.UpdateDTO(**changes.model_dump(exclude_unset=True)),
            )
            await self._keep_default(uow, user_id, unset_id=address_id)
            updated = await uow.addresses.get(user_id, address_id)
            await uow.commit()
            return updated

    async def delete(self, user_id: str, address_id: int) -> None:
        async with self._unit_of_work() as uow:
            await uow.addresses.delete(user_id, address_id)
            await self._keep_default(uow, user_id)
            await uow.commit()

    @staticmethod
    async def _keep_default(uow, user_id: str, unset_id: int | None = None) -> None:
        # The newest other address takes over when none is the default;
        # a lone address stays the default
        addresses = await uow.addresses.list_for_user(user_id)
        if not addresses or any(address.is_default for address in addresses):
            return

        successor = next(
            (address for address in addresses if address.id != unset_id), addresses[0]
        )
        await uow.addresses.update(
            user_id, successor.id, AddressRepository.UpdateDTO(is_default=True)
        )
