import argparse
import os

import numpy as np
import pandas as pd

SENSOR_TYPES = [
    "Temperature Sensor", "Humidity Sensor", "Air Quality Sensor", "Smart Gateway",
    "Edge Hub", "Valve Actuator", "Motor Actuator", "HVAC Controller", "Lighting Controller",
    "Motion Detector",
]


def build_dataset(rows: int, seed=None) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    return pd.DataFrame({
        "query_id": np.arange(1, rows + 1),
        "sensor_type": rng.choice(SENSOR_TYPES, rows),
        "data_size_bytes": rng.integers(256, 65536, rows),
        "quantity": rng.integers(1, 50, rows),
        "duration": rng.integers(1, 120, rows),
        "energy_consumption": np.clip(rng.normal(0.5, 0.2, rows), 0, 1).round(4),
        "data_yield": rng.uniform(0, 1, rows).round(4),
        "hypervolume_value": rng.uniform(0, 1, rows).round(4),
        "transmission_efficiency": np.clip(rng.normal(0.7, 0.15, rows), 0, 1).round(4),
    })


def main():
    p = argparse.ArgumentParser(description="Write a synthetic device dataset CSV")
    p.add_argument('--rows', type=int, default=500)
    p.add_argument('--out', default=os.path.join('data', 'cde_ipaas_dataset.csv'))
    p.add_argument('--seed', type=int, default=None)
    args = p.parse_args()
    df = build_dataset(args.rows, args.seed)
    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    df.to_csv(args.out, index=False)
    print(f"Wrote {len(df)} rows to {args.out}")
if __name__ == "__main__": main()
