import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from monitoring.application.port.key_value_store_port import KeyValueStorePort

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStorePort):
    """
    로컬 JSON 파일 하나에 key -> 문자열 값을 저장한다.
    set 은 임시 파일에 쓴 뒤 교체하므로, 반환 시점에 이미 디스크에 반영되어 있다.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except Exception:
            # 실패한 임시 파일은 남기지 않는다.
            os.unlink(tmp_path)
            raise

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("[STATE-STORE] unreadable state file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}
