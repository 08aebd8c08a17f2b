"""Names of JaguarMicro sub-systems, modules, sub-modules and devices."""

from __future__ import annotations

from .recording import err_severity

JM_SUB_SYS_CSUB = 0
JM_SUB_SYS_CMN = 1
JM_SUB_SYS_DDRH = 2
JM_SUB_SYS_DDRV = 3
JM_SUB_SYS_GIC = 4
JM_SUB_SYS_IOSUB = 5
JM_SUB_SYS_SCP = 6
JM_SUB_SYS_MCP = 7
JM_SUB_SYS_IMU0 = 8
JM_SUB_SYS_DPE = 9
JM_SUB_SYS_RPE = 10
JM_SUB_SYS_PSUB = 11
JM_SUB_SYS_HAC = 12
JM_SUB_SYS_TCM = 13
JM_SUB_SYS_IMU1 = 14

IOSUB_MOD_SMMU = 0
IOSUB_MOD_OTHER = 2
DPE_MOD_SMMU = 11
RPE_MOD_SMMU = 2
PSUB_MOD_PCIE0 = 0
PSUB_MOD_X2RC_SMMU = 7
PSUB_MOD_X16RC_SMMU = 8
PSUB_MOD_SDMA_SMMU = 9
TCM_MOD_SMMU = 1

_SOC_DESC = ("Corsica1.0",)

_SUBSYSTEM_DESC = (
    "N2", "CMN", "DDRH", "DDRV", "GIC", "IOSUB", "SCP", "MCP", "IMU0",
    "DPE", "RPE", "PSUB", "HAC", "TCM", "IMU1",
)

_DDR_MODULES = ("DDRCtrl", "DDRPHY", "SRAM")
_IMU_MODULES = ("SRAM", "WDT")

_MODULE_DESC: dict[int, tuple[str, ...]] = {
    JM_SUB_SYS_CMN: ("MXP", "HNI", "HNF", "SBSX", "CCG", "HND"),
    JM_SUB_SYS_DDRH: _DDR_MODULES,
    JM_SUB_SYS_DDRV: _DDR_MODULES,
    JM_SUB_SYS_GIC: ("GICIP", "GICSRAM"),
    JM_SUB_SYS_IOSUB: ("SMMU", "NIC450", "OTHER"),
    JM_SUB_SYS_SCP: ("SRAM", "WDT", "PLL"),
    JM_SUB_SYS_MCP: ("SRAM", "WDT"),
    JM_SUB_SYS_IMU0: _IMU_MODULES,
    JM_SUB_SYS_IMU1: _IMU_MODULES,
    JM_SUB_SYS_DPE: (
        "EPG", "PIPE", "EMEP", "IMEP", "EPAE", "IPAE", "ETH", "TPG", "MIG",
        "HIG", "DPETOP", "SMMU",
    ),
    JM_SUB_SYS_RPE: ("TOP", "TXP_RXP", "SMMU"),
    JM_SUB_SYS_PSUB: (
        "PCIE0", "UP_MIX", "PCIE1", "PTOP", "N2IF", "VPE0_RAS", "VPE1_RAS",
        "X2RC_SMMU", "X16RC_SMMU", "SDMA_SMMU",
    ),
    JM_SUB_SYS_HAC: ("SRAM", "SMMU"),
    JM_SUB_SYS_TCM: ("SRAM", "SMMU", "IP"),
}

_SMMU_SUB = ("TCU", "TBU")

_SUBMODULE_DESC: dict[tuple[int, int], tuple[str, ...]] = {
    (JM_SUB_SYS_IOSUB, IOSUB_MOD_SMMU): ("TBU", "TCU"),
    (JM_SUB_SYS_IOSUB, IOSUB_MOD_OTHER): ("RAM",),
    (JM_SUB_SYS_DPE, DPE_MOD_SMMU): _SMMU_SUB,
    (JM_SUB_SYS_RPE, RPE_MOD_SMMU): _SMMU_SUB,
    (JM_SUB_SYS_PSUB, PSUB_MOD_PCIE0): ("RAS0", "RAS1"),
    (JM_SUB_SYS_PSUB, PSUB_MOD_X2RC_SMMU): _SMMU_SUB,
    (JM_SUB_SYS_PSUB, PSUB_MOD_X16RC_SMMU): _SMMU_SUB,
    (JM_SUB_SYS_PSUB, PSUB_MOD_SDMA_SMMU): _SMMU_SUB,
    (JM_SUB_SYS_TCM, TCM_MOD_SMMU): _SMMU_SUB,
}


def _pick(names: tuple[str, ...] | None, index: int) -> str:
    if names is None or not 0 <= index < len(names):
        return "unknown"
    return names[index]


def soc_description(soc_id: int) -> str:
    """Return the SoC name for an id, or "unknown"."""
    return _pick(_SOC_DESC, soc_id)


def subsystem_description(subsys_id: int) -> str:
    """Return the sub-system name for an id, or "unknown"."""
    return _pick(_SUBSYSTEM_DESC, subsys_id)


def module_description(subsys_id: int, mod_id: int) -> str:
    """Return the name of a module within a sub-system, or "unknown"."""
    return _pick(_MODULE_DESC.get(subsys_id), mod_id)


def submodule_description(subsys_id: int, mod_id: int, sub_id: int) -> str:
    """Return the name of a sub-module within a module, or "unknown"."""
    return _pick(_SUBMODULE_DESC.get((subsys_id, mod_id)), sub_id)


def device_description(subsys_id: int, mod_id: int, sub_id: int) -> str:
    """Return the kind of device reported by a sub-system."""
    if subsys_id == JM_SUB_SYS_CSUB:
        return "CORE"
    if subsys_id in (JM_SUB_SYS_DDRH, JM_SUB_SYS_DDRV):
        return "CHNL"
    if subsys_id == JM_SUB_SYS_CMN:
        return "NID"
    return "DEV"


def severity_name(code: int) -> str:
    """Return the textual name of an error severity code."""
    return err_severity(code)