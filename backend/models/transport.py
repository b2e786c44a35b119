# models/transport.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Literal, Optional

TransportModeId = Literal["walking", "cycling", "driving", "transit"]


@dataclass(frozen=True)
class TransportMode:
    id: str
    name: str
    mapbox_profile: str
    color: str
    icon: str
    emissions_factor: float  # kg CO2 per km
    cost_factor: float  # currency per km
    calories_factor: Optional[float] = None  # kcal per km, active modes only

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        return {
            "id": d["id"],
            "name": d["name"],
            "mapboxProfile": d["mapbox_profile"],
            "color": d["color"],
            "icon": d["icon"],
            "emissionsFactor": d["emissions_factor"],
            "costFactor": d["cost_factor"],
            "caloriesFactor": d["calories_factor"],
        }


# UK Government GHG Conversion Factors 2023, EPA and EEA fleet data
TRANSPORT_MODES: Dict[str, TransportMode] = {
    "walking": TransportMode(
        id="walking",
        name="Walking",
        mapbox_profile="mapbox/walking",
        color="#22c55e",
        icon="🚶",
        emissions_factor=0.0,
        cost_factor=0.0,
        calories_factor=45,
    ),
    "cycling": TransportMode(
        id="cycling",
        name="Cycling",
        mapbox_profile="mapbox/cycling",
        color="#3b82f6",
        icon="🚴",
        emissions_factor=0.0,
        cost_factor=0.0,
        calories_factor=35,
    ),
    "driving": TransportMode(
        id="driving",
        name="Driving",
        mapbox_profile="mapbox/driving",
        color="#ef4444",
        icon="🚗",
        emissions_factor=0.18,  # weighted EPA/DEFRA/EEA passenger car average
        cost_factor=0.45,  # fuel, maintenance, insurance, depreciation
    ),
    "transit": TransportMode(
        id="transit",
        name="Public Transit",
        mapbox_profile="mapbox/driving",  # routing fallback
        color="#8b5cf6",
        icon="🚌",
        emissions_factor=0.089,  # per passenger
        cost_factor=0.15,  # average fare
    ),
}
