"""Per-category cards: a titled block of pre-styled lines for each metric group."""

from dataclasses import dataclass

from rich.text import Text

from pymole.bars import battery_bar, clamp_percent, io_bar, mini_bar, net_bar, progress_bar
from pymole.config import DEFAULT_PRIMARY_INTERFACE, ViewConfig
from pymole.formatting import (
    TEMPERATURE,
    Band,
    colorize,
    format_rate,
    human_bytes,
    human_bytes_short,
    join_parts,
    pressure_band,
    shorten,
    styled,
)
from pymole.models import (
    BatteryStatus,
    CPUStatus,
    DiskIOStatus,
    DiskStatus,
    GPUStatus,
    MemoryStatus,
    MetricsSnapshot,
    NetworkStatus,
    ProcessInfo,
    ProxyStatus,
    SensorReading,
    ThermalStatus,
)

ICON_CPU = "⚙"
ICON_MEMORY = "▦"
ICON_GPU = "▣"
ICON_DISK = "▤"
ICON_NETWORK = "⇅"
ICON_BATTERY = "▮"
ICON_SENSORS = "♨"
ICON_PROCS = "▶"

MAX_CORES = 3
MAX_PROCESSES = 3
NAME_WIDTH = 12

CHARGING_STATES = ("charging", "charged")
LOW_BATTERY = 20


@dataclass(slots=True, frozen=True)
class Card:
    """A titled block of display lines for one metric category."""

    icon: str
    title: str
    lines: tuple[Text, ...]


def _subtle(text: str) -> Text:
    return styled(text, Band.SUBTLE)


def _percent_line(label: str, bar: Text, percent: float) -> Text:
    return Text.assemble(label, bar, f"  {percent:5.1f}%")


def cpu_card(cpu: CPUStatus) -> Card:
    """Overall usage, load averages and the busiest cores."""
    lines = [
        _percent_line("Total  ", progress_bar(cpu.usage), cpu.usage),
        _subtle(
            f"{cpu.load1:.2f} / {cpu.load5:.2f} / {cpu.load15:.2f}  ({cpu.logical_cpu} cores)"
        ),
    ]

    if cpu.per_core_estimated:
        lines.append(_subtle("Per-core data unavailable (using averaged load)"))
    elif cpu.per_core:
        busiest = sorted(enumerate(cpu.per_core), key=lambda core: core[1], reverse=True)
        for index, usage in busiest[:MAX_CORES]:
            lines.append(_percent_line(f"Core{index + 1:<2} ", progress_bar(usage), usage))

    return Card(ICON_CPU, "CPU", tuple(lines))


def free_percent(used_percent: float) -> float:
    """Free share of memory, derived so that used + free is exactly 100."""
    return 100 - clamp_percent(used_percent)


def memory_card(mem: MemoryStatus) -> Card:
    """Used and free memory, swap and the pressure label."""
    free = free_percent(mem.used_percent)
    available = max(mem.total - mem.used, 0)
    lines = [
        _percent_line("Used   ", progress_bar(mem.used_percent), mem.used_percent),
        _subtle(f"{human_bytes(mem.used)} / {human_bytes(mem.total)} total"),
        _percent_line("Free   ", progress_bar(free), free),
        _subtle(f"{human_bytes(available)} available"),
    ]

    if mem.swap_total > 0 or mem.swap_used > 0:
        swap_percent = 0.0
        if mem.swap_total > 0:
            swap_percent = mem.swap_used / mem.swap_total * 100.0
        lines.append(
            Text.assemble(
                _percent_line("Swap   ", progress_bar(swap_percent), swap_percent),
                "  ",
                _subtle(f"{human_bytes(mem.swap_used)} / {human_bytes(mem.swap_total)} swap"),
            )
        )
    else:
        lines.append(Text.assemble("Swap   ", _subtle("not in use")))

    if mem.pressure:
        lines.append(styled(f"Status {mem.pressure}", pressure_band(mem.pressure)))

    return Card(ICON_MEMORY, "Memory", tuple(lines))


def disk_label(prefix: str, index: int, total: int) -> str:
    """Label a disk within its group; lone members get the bare prefix."""
    if total <= 1:
        return prefix
    return f"{prefix}{index + 1}"


def _disk_line(label: str, disk: DiskStatus) -> Text:
    used = human_bytes_short(disk.used)
    total = human_bytes_short(disk.total)
    return Text.assemble(
        f"{label:<6} ",
        progress_bar(disk.used_percent),
        f"  {disk.used_percent:5.1f}% ({used}/{total})",
    )


def disk_card(disks: tuple[DiskStatus, ...], io: DiskIOStatus) -> Card:
    """Internal then external volumes, followed by read/write throughput."""
    lines: list[Text] = []
    if not disks:
        lines.append(_subtle("Collecting..."))
    else:
        internal = [disk for disk in disks if not disk.external]
        external = [disk for disk in disks if disk.external]
        for prefix, group in (("INTR", internal), ("EXTR", external)):
            for index, disk in enumerate(group):
                lines.append(_disk_line(disk_label(prefix, index, len(group)), disk))

    lines.append(Text.assemble("Read   ", io_bar(io.read_rate), f"  {io.read_rate:.1f} MB/s"))
    lines.append(Text.assemble("Write  ", io_bar(io.write_rate), f"  {io.write_rate:.1f} MB/s"))
    return Card(ICON_DISK, "Disk", tuple(lines))


def _thermal_line(thermal: ThermalStatus) -> Text | None:
    parts: list[Text] = []
    if thermal.cpu_temp > 0:
        parts.append(colorize(thermal.cpu_temp, TEMPERATURE, f"{thermal.cpu_temp:.0f}°C"))
    if thermal.fan_speed > 0:
        parts.append(Text(f"{thermal.fan_speed} RPM"))
    if not parts:
        return None
    return Text(" · ").join(parts)


def power_card(batteries: tuple[BatteryStatus, ...], thermal: ThermalStatus) -> Card:
    """
    Battery level, charge status and health, plus CPU temperature and fan.

    Only the first battery is shown on hosts with several.
    """
    lines: list[Text] = []
    if not batteries:
        lines.append(_subtle("No battery"))
    else:
        battery = batteries[0]
        status = battery.status.lower()
        charging = status in CHARGING_STATES

        percent_text = Text(f"{battery.percent:5.1f}%")
        if battery.percent < LOW_BATTERY and not charging:
            percent_text = styled(percent_text.plain, Band.DANGER)
        lines.append(Text.assemble("Level  ", battery_bar(battery.percent), "  ", percent_text))

        status_text = battery.status[:1].upper() + battery.status[1:].lower()
        status_text = join_parts([status_text, battery.time_left])
        if charging:
            lines.append(styled(status_text + " ⚡", Band.OK))
        elif battery.percent < LOW_BATTERY:
            lines.append(styled(status_text, Band.DANGER))
        else:
            lines.append(_subtle(status_text))

        cycles = f"{battery.cycle_count} cycles" if battery.cycle_count > 0 else ""
        health = join_parts([battery.health, cycles])
        if health:
            lines.append(_subtle(health))

        thermal_line = _thermal_line(thermal)
        if thermal_line is not None:
            lines.append(thermal_line)

    return Card(ICON_BATTERY, "Power", tuple(lines))


def primary_ip(statuses: tuple[NetworkStatus, ...], primary_interface: str) -> str:
    """IP of the first interface with the configured name that has one."""
    for status in statuses:
        if status.name == primary_interface and status.ip:
            return status.ip
    return ""


def network_card(
    statuses: tuple[NetworkStatus, ...],
    proxy: ProxyStatus,
    primary_interface: str = DEFAULT_PRIMARY_INTERFACE,
) -> Card:
    """Total download/upload rates with proxy and primary IP."""
    if not statuses:
        return Card(ICON_NETWORK, "Network", (_subtle("Collecting..."),))

    total_rx = sum(status.rx_rate_mbs for status in statuses)
    total_tx = sum(status.tx_rate_mbs for status in statuses)
    lines = [
        Text.assemble("Down   ", net_bar(total_rx), "  ", format_rate(total_rx)),
        Text.assemble("Up     ", net_bar(total_tx), "  ", format_rate(total_tx)),
    ]

    proxy_text = f"Proxy {proxy.type}" if proxy.enabled else ""
    info = join_parts([proxy_text, primary_ip(statuses, primary_interface)])
    if info:
        lines.append(_subtle(info))

    return Card(ICON_NETWORK, "Network", tuple(lines))


def process_card(processes: tuple[ProcessInfo, ...]) -> Card:
    """The busiest processes with compact CPU bars."""
    lines = [
        Text.assemble(
            f"{shorten(proc.name, NAME_WIDTH):<{NAME_WIDTH}}  ",
            mini_bar(proc.cpu),
            f"  {proc.cpu:5.1f}%",
        )
        for proc in processes[:MAX_PROCESSES]
    ]
    if not lines:
        lines.append(_subtle("No data"))
    return Card(ICON_PROCS, "Processes", tuple(lines))


def has_gpu_data(gpus: tuple[GPUStatus, ...]) -> bool:
    """Whether any GPU reports a usable utilisation reading."""
    return any(gpu.usage >= 0 for gpu in gpus)


def gpu_card(gpus: tuple[GPUStatus, ...]) -> Card:
    """Utilisation per GPU; GPUs without a reading show their name only."""
    lines: list[Text] = []
    for gpu in gpus:
        name = shorten(gpu.name, NAME_WIDTH)
        if gpu.usage >= 0:
            lines.append(_percent_line(f"{name:<{NAME_WIDTH}}  ", progress_bar(gpu.usage), gpu.usage))
        else:
            lines.append(Text(name))
    if not lines:
        lines.append(_subtle("No GPU detected"))
    return Card(ICON_GPU, "GPU", tuple(lines))


def has_sensor_data(sensors: tuple[SensorReading, ...]) -> bool:
    """Whether any reading is available and positive."""
    return any(not sensor.note and sensor.value > 0 for sensor in sensors)


def sensors_card(sensors: tuple[SensorReading, ...]) -> Card:
    """Available sensor readings coloured by temperature bands."""
    lines = [
        Text.assemble(
            f"{shorten(sensor.label, NAME_WIDTH):<{NAME_WIDTH}} ",
            colorize(sensor.value, TEMPERATURE, f"{sensor.value:.1f}"),
            sensor.unit,
        )
        for sensor in sensors
        if not sensor.note
    ]
    if not lines:
        lines.append(_subtle("No sensors"))
    return Card(ICON_SENSORS, "Sensors", tuple(lines))


def build_cards(snapshot: MetricsSnapshot, config: ViewConfig | None = None) -> list[Card]:
    """
    Build every card for a snapshot in display order.

    Rows pair up as CPU/Memory, Disk/Power, Processes/Network, then GPU and
    sensors when they have something to show.
    """
    config = config or ViewConfig()
    cards = [
        cpu_card(snapshot.cpu),
        memory_card(snapshot.memory),
        disk_card(snapshot.disks, snapshot.disk_io),
        power_card(snapshot.batteries, snapshot.thermal),
        process_card(snapshot.top_processes),
        network_card(snapshot.network, snapshot.proxy, config.primary_interface),
    ]
    if has_gpu_data(snapshot.gpu):
        cards.append(gpu_card(snapshot.gpu))
    if has_sensor_data(snapshot.sensors):
        cards.append(sensors_card(snapshot.sensors))
    return cards
