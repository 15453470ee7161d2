"""
MAC Address Table Collector

Counts dynamic MAC address-table entries per active VLAN.
Only NX-OS output formats are understood so far.
"""

from typing import List, Sequence
import re

from cisco_exporter.monitoring.metrics import MetricSample
from cisco_exporter.rpc.client import NXOS, RPCClient
from .base import RPCCollector


VLAN_BRIEF_COMMAND = "show vlan brief | include active | no-more"
MAC_COUNT_COMMAND = "show mac address-table count dynamic vlan {}"

# "100  Engineering   active   Eth1/1"
VLAN_PATTERN = re.compile(r"^\s*(\d+)\s+")
# "Total MAC Addresses in Use:     76"
MAC_COUNT_PATTERN = re.compile(r"in Use:\s+(\d+)$")


def parse_vlans(os_type: str, output: str) -> List[int]:
    """
    Extract VLAN IDs from "show vlan brief" output.

    Raises:
        ValueError: If the OS family is not supported
    """
    if os_type != NXOS:
        raise ValueError(f"mactable is not implemented yet for {os_type}")

    vlans = []
    for line in output.split("\n"):
        match = VLAN_PATTERN.match(line)
        if match:
            vlans.append(int(match.group(1)))
    return vlans


def parse_mac_count(os_type: str, output: str) -> int:
    """
    Extract the dynamic MAC count from "show mac address-table count" output.

    Raises:
        ValueError: If the OS family is not supported or no count is present
    """
    if os_type != NXOS:
        raise ValueError(f"mactable is not implemented yet for {os_type}")

    for line in output.split("\n"):
        match = MAC_COUNT_PATTERN.search(line.rstrip())
        if match:
            return int(match.group(1))

    raise ValueError("count not found")


class MactableCollector(RPCCollector):
    """Collector for per-VLAN MAC address counts"""

    NAME = "mactable"

    def describe(self):
        self.count = self.metrics.describe(
            "mactable_count", "Count of MAC addresses", ["target", "vlan"]
        )

    def collect(self, client: RPCClient, label_values: Sequence[str]) -> List[MetricSample]:
        output = client.run_command(VLAN_BRIEF_COMMAND)
        vlans = parse_vlans(client.os_type, output)
        self.logger.debug(f"vlans: {vlans}")

        samples = []
        for vlan in vlans:
            output = client.run_command(MAC_COUNT_COMMAND.format(vlan))
            count = parse_mac_count(client.os_type, output)
            samples.append(MetricSample(
                name=self.count.name,
                label_values=tuple(label_values) + (str(vlan),),
                value=float(count)
            ))

        return samples
