from __future__ import annotations

"""
Observability export: CSV snapshots of the solver's particle data.

What this module does:
- Writes one CSV file with per-particle attributes for offline analysis.

How it works:
- Reads arrays from `ParticleState` and writes them in a stable column order.
- Removed particles are kept as rows with active=0 so ids stay stable.

Constraints:
- Pure I/O: simulation state is never modified.
"""

from pathlib import Path

import numpy as np

from sph2d.core.state import ParticleState


def export_particles_csv(path: str | Path, state: ParticleState) -> None:
    """
    Export a snapshot of all particle slots to CSV.

    Columns:
      id, active, x, y, vx, vy, rho, p
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    n = state.n
    ids = np.arange(n, dtype=np.int64)

    header = "id,active,x,y,vx,vy,rho,p\n"
    table = np.column_stack(
        [
            ids,
            state.active.astype(np.int64),
            state.pos[:, 0],
            state.pos[:, 1],
            state.vel[:, 0],
            state.vel[:, 1],
            state.rho,
            state.p,
        ]
    )
    fmt = "%d,%d,%.17g,%.17g,%.17g,%.17g,%.17g,%.17g"

    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(header)
        if n:
            np.savetxt(f, table, delimiter=",", fmt=fmt)
