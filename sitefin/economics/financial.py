"""Financial configuration: validation, ownership fallbacks and health-cost defaults.

:func:`build_financial_config` turns a raw :class:`FinancialInputs` into
an immutable :class:`FinancialConfig` for one model run.  Health damage
costs and their escalation rates that the caller left unset are filled
from the EASIUR lookups for the site.

When ``third_party_ownership`` is False the offtaker's discount and tax
rates are used for the owner as well.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sitefin.economics.present_value import straight_line_depreciation_savings
from sitefin.emissions.costs import (
    POLLUTANTS,
    Found,
    resolve_costs,
    resolve_escalation,
)
from sitefin.emissions.easiur import EmissionsGridCache
from sitefin.exceptions import MissingHealthCostInputs
from sitefin.schemas.financial import FinancialInputs

logger = logging.getLogger(__name__)

# Pollutant prefix used in field names, per EASIUR pollutant key.
_FIELD_PREFIX: dict[str, str] = {"NOx": "nox", "SO2": "so2", "PM25": "pm25"}

DEFAULT_MICROGRID_UPGRADE_COST_PCT: float = 0.3


def _health_fields(template: str) -> dict[str, str]:
    """Map pollutant -> input field name for a field-name template."""
    return {p: template.format(prefix=_FIELD_PREFIX[p]) for p in POLLUTANTS}


GRID_COST_FIELDS = _health_fields("{prefix}_grid_cost_per_tonne")
ONSITE_COST_FIELDS = _health_fields("{prefix}_onsite_fuelburn_cost_per_tonne")
ESCALATION_FIELDS = _health_fields("{prefix}_cost_escalation_pct")


# ======================================================================
# Validated configuration
# ======================================================================

@dataclass(frozen=True)
class FinancialConfig:
    """Resolved financial parameters, read-only for the rest of a run.

    Health cost fields that could not be resolved are 0.0 and named in
    ``missing_health_inputs``; the model then omits health objective
    terms.
    """

    off_grid_flag: bool
    om_cost_escalation_pct: float
    elec_cost_escalation_pct: float
    boiler_fuel_cost_escalation_pct: float
    chp_fuel_cost_escalation_pct: float
    generator_fuel_cost_escalation_pct: float
    offtaker_tax_pct: float
    offtaker_discount_pct: float
    third_party_ownership: bool
    owner_tax_pct: float
    owner_discount_pct: float
    analysis_years: int
    value_of_lost_load_per_kwh: float | tuple[float, ...]
    microgrid_upgrade_cost_pct: float
    macrs_five_year: tuple[float, ...]
    macrs_seven_year: tuple[float, ...]
    co2_cost_per_tonne: float
    co2_cost_escalation_pct: float
    nox_grid_cost_per_tonne: float
    so2_grid_cost_per_tonne: float
    pm25_grid_cost_per_tonne: float
    nox_onsite_fuelburn_cost_per_tonne: float
    so2_onsite_fuelburn_cost_per_tonne: float
    pm25_onsite_fuelburn_cost_per_tonne: float
    nox_cost_escalation_pct: float
    so2_cost_escalation_pct: float
    pm25_cost_escalation_pct: float
    offgrid_other_capital_costs: float
    offgrid_other_annual_costs: float
    model_health_obj: bool
    missing_health_inputs: tuple[str, ...] = ()

    @property
    def health_inputs_complete(self) -> bool:
        return not self.missing_health_inputs

    def offgrid_other_capex_depreciation_savings(self) -> float:
        """PV of the owner's tax savings from depreciating ``offgrid_other_capital_costs``."""
        return straight_line_depreciation_savings(
            self.offgrid_other_capital_costs,
            self.owner_discount_pct,
            self.analysis_years,
            self.owner_tax_pct,
        )


# ======================================================================
# Builder
# ======================================================================

def _fill_from_lookup(
    values: dict[str, Any],
    fields: dict[str, str],
    lookup,
    what: str,
) -> None:
    """Fill unset *fields* in *values* from a lazily evaluated lookup."""
    if all(values[name] is not None for name in fields.values()):
        return

    result = lookup()
    if not isinstance(result, Found):
        logger.info("No site-specific %s available: %s", what, result.reason)
        return

    for pollutant, name in fields.items():
        if values[name] is None and pollutant in result:
            values[name] = result[pollutant]


def build_financial_config(
    inputs: FinancialInputs | Mapping[str, Any],
    latitude: float,
    longitude: float,
    cache: EmissionsGridCache | None = None,
) -> FinancialConfig:
    """Validate *inputs* and resolve defaults for the site at (*latitude*, *longitude*).

    Parameters
    ----------
    inputs : FinancialInputs or mapping
        Raw financial inputs.  Mappings are validated into
        :class:`FinancialInputs` (raising pydantic ``ValidationError``).
    latitude, longitude : float
        Site location used for the EASIUR lookups.
    cache : EmissionsGridCache, optional
        Grid cache shared by the lookups.  A fresh one is created if
        omitted.

    Returns
    -------
    FinancialConfig

    Raises
    ------
    MissingHealthCostInputs
        If ``model_health_obj`` is set and any health cost or escalation
        rate is still unknown after the lookups.
    """
    if not isinstance(inputs, FinancialInputs):
        inputs = FinancialInputs(**inputs)

    values = inputs.model_dump()
    off_grid = values["off_grid_flag"]

    if values["microgrid_upgrade_cost_pct"] is None:
        values["microgrid_upgrade_cost_pct"] = 0.0 if off_grid else DEFAULT_MICROGRID_UPGRADE_COST_PCT
    elif off_grid and values["microgrid_upgrade_cost_pct"] != 0.0:
        logger.warning(
            "microgrid_upgrade_cost_pct is not applied when off_grid_flag is true. "
            "Setting microgrid_upgrade_cost_pct to 0.0."
        )
        values["microgrid_upgrade_cost_pct"] = 0.0

    if not off_grid and (
        values["offgrid_other_capital_costs"] != 0.0
        or values["offgrid_other_annual_costs"] != 0.0
    ):
        logger.warning(
            "offgrid_other_capital_costs and offgrid_other_annual_costs are only applied "
            "when off_grid_flag is true. Setting these inputs to 0.0 for this "
            "grid-connected analysis."
        )
        values["offgrid_other_capital_costs"] = 0.0
        values["offgrid_other_annual_costs"] = 0.0

    if not values["third_party_ownership"]:
        values["owner_tax_pct"] = values["offtaker_tax_pct"]
        values["owner_discount_pct"] = values["offtaker_discount_pct"]

    for name in ESCALATION_FIELDS.values():
        if values[name] == 0.0:
            logger.warning(
                "%s was set to 0.0; keeping it as a deliberate zero escalation rate. "
                "Leave it unset to use the site-specific EASIUR rate.", name,
            )

    cache = cache if cache is not None else EmissionsGridCache()
    _fill_from_lookup(
        values, GRID_COST_FIELDS,
        lambda: resolve_costs(latitude, longitude, "grid", cache=cache),
        "grid emissions health costs",
    )
    _fill_from_lookup(
        values, ONSITE_COST_FIELDS,
        lambda: resolve_costs(latitude, longitude, "onsite", cache=cache),
        "onsite fuel burn health costs",
    )
    _fill_from_lookup(
        values, ESCALATION_FIELDS,
        lambda: resolve_escalation(
            latitude, longitude, values["om_cost_escalation_pct"], cache=cache,
        ),
        "health cost escalation rates",
    )

    health_fields = [
        *GRID_COST_FIELDS.values(),
        *ONSITE_COST_FIELDS.values(),
        *ESCALATION_FIELDS.values(),
    ]
    missing = tuple(name for name in health_fields if values[name] is None)

    if missing and values["model_health_obj"]:
        raise MissingHealthCostInputs(
            "To include health costs in the objective function, you must either enter "
            "custom emissions costs and escalation rates or a site location within the "
            f"CAMx grid. Unresolved: {', '.join(missing)}"
        )
    for name in missing:
        values[name] = 0.0

    voll = values["value_of_lost_load_per_kwh"]
    values["value_of_lost_load_per_kwh"] = (
        tuple(float(v) for v in voll) if isinstance(voll, list) else float(voll)
    )
    values["macrs_five_year"] = tuple(values["macrs_five_year"])
    values["macrs_seven_year"] = tuple(values["macrs_seven_year"])

    return FinancialConfig(**values, missing_health_inputs=missing)
