"""Construction-time validation of material parameters.

Scatter functions assume validated inputs and never re-check them inside
kernels, so every registry runs its parameters through these helpers first.
"""


def validate_color(name: str, color: tuple[float, float, float]) -> None:
    """Check that a color has three components, each in [0, 1].

    Raises:
        ValueError: If the color has the wrong arity or a component is
            outside [0, 1].
    """
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"{name} component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


def validate_roughness(roughness: float) -> None:
    """Check that roughness lies in [0, 1].

    Raises:
        ValueError: If roughness is outside [0, 1].
    """
    if roughness < 0.0 or roughness > 1.0:
        raise ValueError(
            f"Roughness = {roughness} is outside [0, 1]. "
            "Roughness must be between 0 (no fuzz) and 1 (maximum fuzz)."
        )
