import os
import yaml
import keyring

APP_VERSION = "1.0.0"

DEFAULT_DB_PATH = "workout.db"
DEFAULT_YAML_PATH = "settings.yaml"


def default_paths() -> tuple[str, str]:
    """Return ``(db_path, yaml_path)`` honouring ``LIFTLOG_DB``/``LIFTLOG_SETTINGS``."""
    return (
        os.environ.get("LIFTLOG_DB", DEFAULT_DB_PATH),
        os.environ.get("LIFTLOG_SETTINGS", DEFAULT_YAML_PATH),
    )


class YamlConfig:
    """Settings mirrored to a YAML file.

    With ``ENCRYPT_SETTINGS=1`` the values of ``SENSITIVE_KEYS`` are kept in
    the system keyring and the file only records that they are set.
    """

    SENSITIVE_KEYS = {"push_token"}
    SERVICE = "liftlog"

    def __init__(self, path: str = DEFAULT_YAML_PATH) -> None:
        self.path = path
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return data

    def load(self) -> dict:
        data = self._read()
        if not self.encrypt:
            return data
        for key in self.SENSITIVE_KEYS & set(data):
            secret = keyring.get_password(self.SERVICE, key)
            if secret is None:
                del data[key]
            else:
                data[key] = secret
        return data

    def save(self, data: dict) -> None:
        out = {k: v for k, v in data.items() if v is not None}
        if self.encrypt:
            for key in self.SENSITIVE_KEYS & set(out):
                keyring.set_password(self.SERVICE, key, str(out[key]))
                out[key] = True
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f, sort_keys=True)
