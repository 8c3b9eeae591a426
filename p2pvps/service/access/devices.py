"""
Devices
-------
"""
from typing import Optional

from p2pvps.models import DevicePublicData, DevicePrivateData, User
from p2pvps.models.listing import DeviceLogin


async def get_device_public(device_id: int) -> Optional[DevicePublicData]:
    """
    :param device_id: The id of the device.
    :return: The public data of the device.
    """
    return await DevicePublicData.filter(id=device_id).first()


async def get_device_private(device_id: int) -> Optional[DevicePrivateData]:
    """
    :param device_id: The id of the public data of the device.
    :return: The private data of the device.
    """
    return await DevicePrivateData.filter(device_id=device_id).first()


async def create_device(owner: User, device_name: str, device_desc: str = "") -> DevicePublicData:
    """Creates a device, along with its (empty) private data."""
    device = await DevicePublicData.create(owner=owner, device_name=device_name, device_desc=device_desc)
    await DevicePrivateData.create(device=device)
    return device


async def set_device_login(private_data: DevicePrivateData, login: DeviceLogin) -> DevicePrivateData:
    private_data.device_user_name = login.username
    private_data.device_password = login.password
    private_data.server_port = login.port
    await private_data.save(update_fields=["device_user_name", "device_password", "server_port"])
    return private_data


async def set_device_contract(device: DevicePublicData, contract_id: Optional[str]) -> DevicePublicData:
    device.ob_contract = contract_id
    await device.save(update_fields=["ob_contract"])
    return device
