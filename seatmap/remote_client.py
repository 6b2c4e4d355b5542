import requests

from seatmap.logger import logger
from seatmap.settings import REMOTE_SYNC_TIMEOUT


def push_snapshot(url: str, blob: str, timeout: float = REMOTE_SYNC_TIMEOUT) -> bool:
    """Отправить снимок состояния в удалённое хранилище"""
    try:
        response = requests.put(
            url,
            data=blob.encode("utf-8"),
            headers={"Content-Type": "application/json; charset=utf-8"},
            timeout=timeout
        )
        response.raise_for_status()
        logger.info(f"Snapshot pushed to {url}")
        return True
    except requests.RequestException as e:
        logger.error(f"Remote sync failed: {e}")
        return False


def fetch_snapshot(url: str, timeout: float = REMOTE_SYNC_TIMEOUT):
    """Получить снимок из удалённого хранилища; None если недоступно"""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.text
    except requests.RequestException as e:
        logger.error(f"Remote store unavailable: {e}")
        return None
