"""Ladder / instruction-list simulation engine.

Scans are pure functions over immutable snapshots:
    scan(Rungs, Current_State) -> Next_State

Every rung reads the image frozen at the start of the scan; coil writes are
batched in a ScanContext and committed together.
"""

from plcortex.core.config import SimulationConfig
from plcortex.core.context import ScanContext
from plcortex.core.driver import DriverState, SimulationDriver
from plcortex.core.instruction import Branch, Instruction, Opcode, RungElement
from plcortex.core.parser import parse_elements, parse_program, parse_rung, parse_token
from plcortex.core.rung import Program, Rung
from plcortex.core.runner import PLCRunner
from plcortex.core.scan import scan
from plcortex.core.state import SystemState
from plcortex.core.tags import RestPolicy, TagPartition, extract_tags

__all__ = [
    "Branch",
    "DriverState",
    "Instruction",
    "Opcode",
    "PLCRunner",
    "Program",
    "RestPolicy",
    "Rung",
    "RungElement",
    "ScanContext",
    "SimulationConfig",
    "SimulationDriver",
    "SystemState",
    "TagPartition",
    "extract_tags",
    "parse_elements",
    "parse_program",
    "parse_rung",
    "parse_token",
    "scan",
]
