"""System monitoring engine for pymole."""

import logging
import os
import platform
import shutil
import socket
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from queue import Queue

import psutil

from pymole.formatting import human_bytes_short
from pymole.models import (
    BatteryStatus,
    CPUStatus,
    DiskIOStatus,
    DiskStatus,
    GPUStatus,
    HardwareInfo,
    MemoryStatus,
    MetricsSnapshot,
    NetworkStatus,
    ProcessInfo,
    ProxyStatus,
    SensorReading,
    ThermalStatus,
)

logger = logging.getLogger(__name__)

MB = 1024 * 1024

# Mount roots where removable media shows up
EXTERNAL_MOUNT_ROOTS = ("/media/", "/run/media/", "/mnt/", "/Volumes/")

# Sensor chips whose first reading is taken as the CPU temperature
CPU_SENSOR_CHIPS = ("coretemp", "k10temp", "cpu_thermal", "zenpower", "acpitz")

PROXY_VARIABLES = ("https_proxy", "http_proxy", "all_proxy")

DMI_PRODUCT_NAME = Path("/sys/devices/virtual/dmi/id/product_name")
CPUINFO = Path("/proc/cpuinfo")


@dataclass(slots=True)
class _Counters:
    """Cumulative I/O counters from the previous poll, for rate computation."""

    timestamp: float
    disk_read: int
    disk_write: int
    net: dict[str, tuple[int, int]]


def health_score(
    cpu_percent: float,
    memory_percent: float,
    disk_percent: float,
    cpu_temp: float = 0.0,
) -> int:
    """
    Score overall health from 0 (critical) to 100 (idle and cool).

    Each resource loses points once it passes its comfortable range.
    """
    score = 100.0
    score -= max(cpu_percent - 50, 0) * 0.6
    score -= max(memory_percent - 60, 0) * 0.75
    score -= max(disk_percent - 80, 0) * 1.5
    if cpu_temp > 0:
        score -= max(cpu_temp - 70, 0) * 1.0
    return int(min(max(round(score), 0), 100))


def is_external_mount(mountpoint: str) -> bool:
    """Whether a mountpoint looks like removable media."""
    return mountpoint.startswith(EXTERNAL_MOUNT_ROOTS)


def format_time_left(seconds: int) -> str:
    """Format a battery time estimate as H:MM, or '' when unknown."""
    if seconds < 0:
        return ""
    hours, remainder = divmod(seconds, 3600)
    return f"{hours}:{remainder // 60:02d}"


def read_proxy(environ: dict[str, str] | None = None) -> ProxyStatus:
    """Proxy status from the standard proxy environment variables."""
    environ = dict(os.environ) if environ is None else environ
    for name in PROXY_VARIABLES:
        value = environ.get(name) or environ.get(name.upper())
        if value:
            kind = "SOCKS" if value.lower().startswith("socks") else "HTTP"
            return ProxyStatus(enabled=True, type=kind)
    return ProxyStatus()


def parse_nvidia_smi(output: str) -> list[GPUStatus]:
    """Parse 'name, utilization' CSV rows from nvidia-smi."""
    gpus: list[GPUStatus] = []
    for row in output.strip().splitlines():
        name, _, usage = row.rpartition(",")
        name = name.strip()
        if not name:
            continue
        try:
            gpus.append(GPUStatus(name=name, usage=float(usage)))
        except ValueError:
            # '[N/A]' when the driver cannot report utilisation
            gpus.append(GPUStatus(name=name))
    return gpus


class SystemMonitor:
    """
    System monitor that collects metrics snapshots using psutil.

    Runs in a separate daemon thread and pushes complete snapshots to a
    thread-safe Queue. A failed poll is logged and kept in last_error until
    the next successful one.
    """

    def __init__(
        self,
        update_queue: Queue[MetricsSnapshot],
        poll_rate: float = 1.0,
        top_n: int = 5,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push snapshots to.
            poll_rate: How often to poll the system (in seconds). Default 1.0s.
            top_n: Number of busiest processes to include.
        """
        self._queue = update_queue
        self._poll_rate = max(0.1, poll_rate)
        self._top_n = top_n
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_error = ""
        self._previous: _Counters | None = None
        self._gpu_available: bool | None = None  # None = not probed yet
        self._hardware: HardwareInfo | None = None
        self._collect_lock = threading.Lock()
        # Initialize CPU percent (first call returns 0.0)
        psutil.cpu_percent(percpu=True)

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)  # Minimum 0.1 seconds

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def last_error(self) -> str:
        """Message of the last failed poll, or '' if the last poll succeeded."""
        return self._last_error

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()
        logger.info("Monitor started (poll_rate=%.1fs)", self._poll_rate)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("Monitor stopped")

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            self.refresh()

            # Wait for poll_rate seconds or until stop is requested
            self._stop_event.wait(timeout=self._poll_rate)

    def refresh(self) -> bool:
        """
        Collect one snapshot and publish it to the queue.

        A failure is logged and kept in last_error instead of being raised.

        Returns:
            True if a snapshot was published.
        """
        try:
            snapshot = self.collect_snapshot()
        except Exception as exc:
            logger.exception("Failed to collect metrics")
            self._last_error = f"Metrics collection failed: {exc}"
            return False
        self._last_error = ""
        self._queue.put(snapshot)
        return True

    def collect_snapshot(self) -> MetricsSnapshot:
        """Collect a complete snapshot of the current system state."""
        with self._collect_lock:
            return self._collect_snapshot()

    def _collect_snapshot(self) -> MetricsSnapshot:
        now = time.time()
        disk_io_counters = psutil.disk_io_counters()
        net_counters = psutil.net_io_counters(pernic=True)
        current = _Counters(
            timestamp=now,
            disk_read=disk_io_counters.read_bytes if disk_io_counters else 0,
            disk_write=disk_io_counters.write_bytes if disk_io_counters else 0,
            net={name: (c.bytes_recv, c.bytes_sent) for name, c in net_counters.items()},
        )

        cpu = self._collect_cpu()
        memory = self._collect_memory()
        disks = self._collect_disks()
        thermal, sensors = self._collect_thermal()
        snapshot = MetricsSnapshot(
            cpu=cpu,
            memory=memory,
            disks=disks,
            disk_io=self._disk_rates(current),
            batteries=self._collect_batteries(),
            thermal=thermal,
            network=self._collect_network(current),
            proxy=read_proxy(),
            top_processes=self._collect_processes(),
            gpu=self._collect_gpus(),
            sensors=sensors,
            hardware=self._collect_hardware(memory, disks),
            health_score=health_score(
                cpu.usage,
                memory.used_percent,
                max((disk.used_percent for disk in disks), default=0.0),
                thermal.cpu_temp,
            ),
            collected_at=now,
        )
        self._previous = current
        return snapshot

    def _collect_cpu(self) -> CPUStatus:
        per_core = psutil.cpu_percent(percpu=True)
        usage = sum(per_core) / len(per_core) if per_core else psutil.cpu_percent()
        load1, load5, load15 = psutil.getloadavg()
        return CPUStatus(
            usage=usage,
            load1=load1,
            load5=load5,
            load15=load15,
            logical_cpu=psutil.cpu_count(logical=True) or 0,
            per_core=tuple(per_core),
            per_core_estimated=not per_core,
        )

    def _collect_memory(self) -> MemoryStatus:
        mem = psutil.virtual_memory()
        swap = psutil.swap_memory()
        if mem.percent >= 90:
            pressure = "critical"
        elif mem.percent >= 75:
            pressure = "warn"
        else:
            pressure = "normal"
        return MemoryStatus(
            used=mem.total - mem.available,
            total=mem.total,
            used_percent=mem.percent,
            swap_used=swap.used,
            swap_total=swap.total,
            pressure=pressure,
        )

    def _collect_disks(self) -> tuple[DiskStatus, ...]:
        disks: list[DiskStatus] = []
        seen_devices: set[str] = set()
        for part in psutil.disk_partitions(all=False):
            if part.device in seen_devices:
                continue
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError:
                logger.debug("Skipping filesystem at %s (unreadable)", part.mountpoint)
                continue
            seen_devices.add(part.device)
            disks.append(
                DiskStatus(
                    mount=part.mountpoint,
                    device=part.device,
                    used=usage.used,
                    total=usage.total,
                    used_percent=usage.percent,
                    external=is_external_mount(part.mountpoint),
                )
            )
        return tuple(disks)

    def _disk_rates(self, current: _Counters) -> DiskIOStatus:
        previous = self._previous
        if previous is None:
            return DiskIOStatus()
        elapsed = current.timestamp - previous.timestamp
        if elapsed <= 0:
            return DiskIOStatus()
        return DiskIOStatus(
            read_rate=max(current.disk_read - previous.disk_read, 0) / MB / elapsed,
            write_rate=max(current.disk_write - previous.disk_write, 0) / MB / elapsed,
        )

    def _collect_network(self, current: _Counters) -> tuple[NetworkStatus, ...]:
        addresses = psutil.net_if_addrs()
        previous = self._previous
        elapsed = current.timestamp - previous.timestamp if previous else 0.0
        statuses: list[NetworkStatus] = []
        for name, (recv, sent) in current.net.items():
            if name == "lo" or name.startswith("lo0"):
                continue
            rx_rate = tx_rate = 0.0
            if previous is not None and elapsed > 0 and name in previous.net:
                prev_recv, prev_sent = previous.net[name]
                rx_rate = max(recv - prev_recv, 0) / MB / elapsed
                tx_rate = max(sent - prev_sent, 0) / MB / elapsed
            ip = next(
                (addr.address for addr in addresses.get(name, []) if addr.family == socket.AF_INET),
                "",
            )
            statuses.append(NetworkStatus(name=name, rx_rate_mbs=rx_rate, tx_rate_mbs=tx_rate, ip=ip))
        return tuple(statuses)

    def _collect_batteries(self) -> tuple[BatteryStatus, ...]:
        sensors_battery = getattr(psutil, "sensors_battery", None)
        battery = sensors_battery() if sensors_battery else None
        if battery is None:
            return ()

        if battery.power_plugged:
            status = "charged" if battery.percent >= 100 else "charging"
        else:
            status = "discharging"

        time_left = ""
        if not battery.power_plugged and battery.secsleft not in (
            psutil.POWER_TIME_UNKNOWN,
            psutil.POWER_TIME_UNLIMITED,
        ):
            time_left = format_time_left(int(battery.secsleft))

        return (BatteryStatus(percent=battery.percent, status=status, time_left=time_left),)

    def _collect_thermal(self) -> tuple[ThermalStatus, tuple[SensorReading, ...]]:
        temps = {}
        if hasattr(psutil, "sensors_temperatures"):
            temps = psutil.sensors_temperatures(fahrenheit=False) or {}
        if not temps:
            logger.debug("No temperature sensors found")

        sensors: list[SensorReading] = []
        for chip, entries in temps.items():
            for index, entry in enumerate(entries):
                label = entry.label or f"{chip} {index}"
                sensors.append(SensorReading(label=label, value=entry.current, unit="°C"))

        cpu_temp = 0.0
        for chip in CPU_SENSOR_CHIPS:
            if temps.get(chip):
                cpu_temp = temps[chip][0].current
                break

        fan_speed = 0
        if hasattr(psutil, "sensors_fans"):
            fans = psutil.sensors_fans() or {}
            speeds = [entry.current for entries in fans.values() for entry in entries]
            fan_speed = max(speeds, default=0)

        return ThermalStatus(cpu_temp=cpu_temp, fan_speed=fan_speed), tuple(sensors)

    def _collect_processes(self) -> tuple[ProcessInfo, ...]:
        """
        Collect the busiest processes by CPU usage.

        Handles NoSuchProcess, AccessDenied and ZombieProcess errors by
        skipping the process.
        """
        processes: list[ProcessInfo] = []
        for proc in psutil.process_iter(attrs=["pid", "name", "cpu_percent"]):
            try:
                with proc.oneshot():
                    info = proc.info
                    processes.append(
                        ProcessInfo(
                            pid=info.get("pid", 0),
                            name=info.get("name") or "",
                            cpu=info.get("cpu_percent") or 0.0,
                        )
                    )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                # Process died mid-poll or is not ours to inspect
                continue

        processes.sort(key=lambda proc: proc.cpu, reverse=True)
        return tuple(processes[: self._top_n])

    def _collect_gpus(self) -> tuple[GPUStatus, ...]:
        """Read GPU utilisation via nvidia-smi; empty if it is unavailable."""
        if self._gpu_available is False:
            return ()
        if shutil.which("nvidia-smi") is None:
            self._gpu_available = False
            return ()
        try:
            result = subprocess.run(
                [
                    "nvidia-smi",
                    "--query-gpu=name,utilization.gpu",
                    "--format=csv,noheader,nounits",
                ],
                capture_output=True,
                text=True,
                timeout=3,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("nvidia-smi failed: %s", exc)
            return ()
        if result.returncode != 0:
            self._gpu_available = False
            return ()
        self._gpu_available = True
        return tuple(parse_nvidia_smi(result.stdout))

    def _collect_hardware(
        self, memory: MemoryStatus, disks: tuple[DiskStatus, ...]
    ) -> HardwareInfo:
        """Describe the host once; the description does not change between polls."""
        if self._hardware is None:
            root = next((disk for disk in disks if disk.mount == "/"), None)
            if root is None and disks:
                root = disks[0]
            self._hardware = HardwareInfo(
                model=_read_model(),
                cpu_model=_read_cpu_model(),
                total_ram=human_bytes_short(memory.total) if memory.total else "",
                disk_size=human_bytes_short(root.total) if root else "",
                os_version=f"{platform.system()} {platform.release()}".strip(),
            )
        return self._hardware


def _read_model() -> str:
    try:
        return DMI_PRODUCT_NAME.read_text().strip()
    except OSError:
        return platform.node()


def _read_cpu_model() -> str:
    try:
        for line in CPUINFO.read_text().splitlines():
            if line.startswith("model name"):
                return line.split(":", 1)[1].strip()
    except OSError:
        logger.debug("No %s on this platform", CPUINFO)
    return platform.processor()
