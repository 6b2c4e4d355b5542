import os

DATA_DIR = os.getenv("SEATMAP_DATA_DIR", "data")
STATE_FILE = os.path.join(DATA_DIR, "cinema_state.json")

LOG_DIR = os.getenv("SEATMAP_LOG_DIR", "logs")
LOG_LEVEL = os.getenv("SEATMAP_LOG_LEVEL", "INFO")

# Пустая строка отключает синхронизацию с удалённым хранилищем
REMOTE_SYNC_URL = os.getenv("SEATMAP_REMOTE_URL", "")
REMOTE_SYNC_TIMEOUT = float(os.getenv("SEATMAP_REMOTE_TIMEOUT", "3"))
