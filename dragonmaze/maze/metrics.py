from typing import Dict

def init_metrics() -> Dict[str, int | float | dict]:
    return {
        'attempts': 0,
        'cells_carved': 0,
        'loops_opened': 0,
        'repairs_performed': 0,
        'exit_repairs': 0,
        'placement_rerolls': 0,
        'validation_failures': 0,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }
