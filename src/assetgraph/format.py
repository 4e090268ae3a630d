"""
Text formatting for command-line output.

Builds the discovered-name lines and the enumeration summary table, with
optional censoring for demonstrations. Colors are applied with
``click.style`` and can be turned off for file output.
"""

from typing import Iterable

import click

from . import __version__
from .analysis.asn import ASNInfo

TOOL_NAME = "AssetGraph"
SITE = "https://github.com/assetgraph/assetgraph"
WIDTH = 80
RULE = "-" * WIDTH


def censor_string(text: str, start: int, end: int) -> str:
    """Replace characters in [start, end) with 'x', keeping separators."""
    chars = list(text)
    for i in range(max(start, 0), min(end, len(chars))):
        if chars[i] in "./- ":
            continue
        chars[i] = "x"
    return "".join(chars)


def censor_domain(name: str) -> str:
    """Censor everything from the first label separator on."""
    idx = name.find(".")
    if idx < 0:
        return name
    return censor_string(name, idx, len(name))


def censor_ip(address: str) -> str:
    """Censor everything up to the last dot, keeping the final octet."""
    return censor_string(address, 0, address.rfind("."))


def censor_netblock(cidr: str) -> str:
    """Censor the network address, keeping the prefix length."""
    return censor_string(cidr, 0, cidr.find("/"))


def output_line_parts(
    name: str, addresses: Iterable[str], demo: bool = False
) -> tuple[str, str]:
    """Return the (possibly censored) name and comma-joined addresses."""
    ips = ",".join(censor_ip(a) if demo else a for a in addresses)
    if demo:
        name = censor_domain(name)
    return name, ips


def format_enumeration_summary(
    total: int,
    asns: dict[int, ASNInfo],
    demo: bool = False,
    color: bool = True,
) -> str:
    """Render the name count and the ASN/netblock table."""
    def style(text, fg):
        return click.style(text, fg=fg) if color else text

    title = f"{TOOL_NAME} {__version__}"
    pad = " " * max(WIDTH - len(title) - len(SITE), 1)

    lines = [
        "",
        style(title + pad + SITE, "blue"),
        style(RULE, "blue"),
        style(str(total), "yellow") + style(" names discovered", "green"),
    ]
    if not asns:
        return "\n".join(lines) + "\n"

    lines.append(style(RULE, "blue"))
    for asn in sorted(asns):
        data = asns[asn]
        asnstr = str(asn)
        rir = data.rir_name
        if demo and asn > 0:
            asnstr = censor_string(asnstr, 0, len(asnstr))
            rir = censor_string(rir, 0, len(rir))
        lines.append(
            f"{style('ASN: ', 'blue')}{style(asnstr, 'yellow')} "
            f"{style('-', 'green')} {style(rir, 'green')}"
        )

        for cidr in sorted(data.cidrs):
            cidrstr = censor_netblock(cidr) if demo else cidr
            cell = f"\t{cidrstr:<18}"
            count = f"\t{data.cidrs[cidr]:<4}"
            lines.append(
                f"{style(cell, 'yellow')}{style(count, 'yellow')} "
                f"{style('Subdomain Name(s)', 'blue')}"
            )

    return "\n".join(lines) + "\n"
