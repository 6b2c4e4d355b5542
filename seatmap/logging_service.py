import json
from datetime import datetime
from pathlib import Path

from seatmap.logger import logger
from seatmap.settings import LOG_DIR

LOG_FILE = Path(LOG_DIR) / "user_actions.log"


def log_action(action: str, user_id: str = "local", details: dict = None):
    """Записывает действие пользователя в журнал"""
    log_entry = {
        "timestamp": datetime.now().isoformat(),
        "action": action,
        "user_id": user_id,
        "details": details or {}
    }

    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")
    except OSError as e:
        logger.error(f"Error writing action log: {e}")


def get_logs(limit: int = 100) -> list:
    """Возвращает последние записи журнала"""
    if not LOG_FILE.exists():
        return []

    try:
        with open(LOG_FILE, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except OSError as e:
        logger.error(f"Error reading action log: {e}")
        return []

    logs = []
    for line in lines[-limit:]:
        try:
            logs.append(json.loads(line))
        except ValueError:
            logger.warning("Skipping corrupt action log line")
    return logs


def clear_logs() -> bool:
    if LOG_FILE.exists():
        LOG_FILE.unlink()
        return True
    return False
