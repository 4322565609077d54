import os
from dataclasses import dataclass


@dataclass(frozen=True)
class MavConfig:
    base_url: str

    connect_timeout: float
    read_timeout: float
    write_timeout: float
    pool_timeout: float


def load_config() -> MavConfig:
    return MavConfig(
        base_url=os.getenv("MAV_BASE_URL", "http://localhost:8080/api/v1"),
        connect_timeout=float(os.getenv("MAV_CONNECT_TIMEOUT_SECONDS", "5")),
        read_timeout=float(os.getenv("MAV_READ_TIMEOUT_SECONDS", "10")),
        write_timeout=float(os.getenv("MAV_WRITE_TIMEOUT_SECONDS", "10")),
        pool_timeout=float(os.getenv("MAV_POOL_TIMEOUT_SECONDS", "30")),
    )
