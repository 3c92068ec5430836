import logging

from rentbill.api.base import BillApi
from rentbill.api.client import ApiClient
from rentbill.settings import settings

logger = logging.getLogger(__name__)


def get_api_client() -> ApiClient:
    logger.info("Using API backend: %s", settings.api_base_url)
    return ApiClient(settings.api_base_url, settings.api_timeout)


def get_bill_api(client: ApiClient | None = None) -> BillApi:
    from rentbill.api.http import HttpBillApi

    return HttpBillApi(client or get_api_client())
