"""Data models for pymole."""

from dataclasses import dataclass

# Sentinel GPU usage for "no usable reading".
GPU_USAGE_UNAVAILABLE = -1.0


@dataclass(slots=True, frozen=True)
class CPUStatus:
    """Overall and per-core CPU usage."""

    usage: float  # 0.0 - 100.0
    load1: float
    load5: float
    load15: float
    logical_cpu: int
    per_core: tuple[float, ...] = ()
    per_core_estimated: bool = False


@dataclass(slots=True, frozen=True)
class MemoryStatus:
    """Physical memory and swap usage."""

    used: int  # Bytes
    total: int  # Bytes
    used_percent: float
    swap_used: int = 0
    swap_total: int = 0
    pressure: str = ""  # 'normal', 'warn', 'critical' or empty


@dataclass(slots=True, frozen=True)
class DiskStatus:
    """Usage of a single mounted volume."""

    mount: str
    device: str
    used: int  # Bytes
    total: int  # Bytes
    used_percent: float
    external: bool = False


@dataclass(slots=True, frozen=True)
class DiskIOStatus:
    """Aggregate disk throughput in MB/s."""

    read_rate: float = 0.0
    write_rate: float = 0.0


@dataclass(slots=True, frozen=True)
class BatteryStatus:
    """State of a single battery."""

    percent: float
    status: str  # 'charging', 'discharging', 'charged', ...
    time_left: str = ""
    health: str = ""
    cycle_count: int = 0


@dataclass(slots=True, frozen=True)
class ThermalStatus:
    """CPU temperature (Celsius) and fan speed (RPM)."""

    cpu_temp: float = 0.0
    fan_speed: int = 0


@dataclass(slots=True, frozen=True)
class NetworkStatus:
    """Throughput of a single network interface in MB/s."""

    name: str
    rx_rate_mbs: float
    tx_rate_mbs: float
    ip: str = ""


@dataclass(slots=True, frozen=True)
class ProxyStatus:
    """System proxy configuration."""

    enabled: bool = False
    type: str = ""


@dataclass(slots=True, frozen=True)
class ProcessInfo:
    """A process in the top-N list."""

    pid: int
    name: str
    cpu: float  # 0.0 - 100.0 * core_count


@dataclass(slots=True, frozen=True)
class GPUStatus:
    """GPU name and utilisation; negative usage means no reading."""

    name: str
    usage: float = GPU_USAGE_UNAVAILABLE


@dataclass(slots=True, frozen=True)
class SensorReading:
    """A labelled sensor value. A non-empty note marks it unavailable."""

    label: str
    value: float
    unit: str
    note: str = ""


@dataclass(slots=True, frozen=True)
class HardwareInfo:
    """Static description of the host, pre-formatted for display."""

    model: str = ""
    cpu_model: str = ""
    total_ram: str = ""
    disk_size: str = ""
    os_version: str = ""


@dataclass(slots=True, frozen=True)
class MetricsSnapshot:
    """Immutable point-in-time view of every monitored category."""

    cpu: CPUStatus
    memory: MemoryStatus
    disks: tuple[DiskStatus, ...] = ()
    disk_io: DiskIOStatus = DiskIOStatus()
    batteries: tuple[BatteryStatus, ...] = ()
    thermal: ThermalStatus = ThermalStatus()
    network: tuple[NetworkStatus, ...] = ()
    proxy: ProxyStatus = ProxyStatus()
    top_processes: tuple[ProcessInfo, ...] = ()
    gpu: tuple[GPUStatus, ...] = ()
    sensors: tuple[SensorReading, ...] = ()
    hardware: HardwareInfo = HardwareInfo()
    health_score: int = 0
    collected_at: float = 0.0  # Unix timestamp

    @classmethod
    def empty(cls) -> "MetricsSnapshot":
        """Snapshot used before the first collection completes."""
        return cls(
            cpu=CPUStatus(usage=0.0, load1=0.0, load5=0.0, load15=0.0, logical_cpu=0),
            memory=MemoryStatus(used=0, total=0, used_percent=0.0),
        )
