"""
Category Detection from Titles

Best-effort classifier that derives a publication category from its title
alone. It is only used when an upstream export carries no category at all
(``--detect-category``); explicit categories are always validated as given.

Rules are evaluated top to bottom and the first match wins, so the order of
CATEGORY_RULES is part of the behaviour: real-estate phrases such as
"vendo casa" are claimed by inmuebles before the generic "vendo" rule of
productos is reached.
"""

from dataclasses import dataclass

DEFAULT_CATEGORY = 'productos'


@dataclass(frozen=True)
class CategoryRule:
    """Keywords (substring match) that classify a title into a category."""

    category: str
    keywords: tuple[str, ...]
    exclusions: tuple[str, ...] = ()

    def matches(self, lowered_title: str) -> bool:
        if any(exclusion in lowered_title for exclusion in self.exclusions):
            return False
        return any(keyword in lowered_title for keyword in self.keywords)


_REAL_ESTATE_SALES = ('vendo terreno', 'vendo lote', 'vendo casa', 'vendo departamento')

CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule('inmuebles', (
        'alquilo', 'alquiler', *_REAL_ESTATE_SALES, 'anticresis',
        'inmueble', 'habitación', 'oficina', 'local comercial',
    )),
    CategoryRule('vehiculos', (
        'auto', 'camioneta', 'vehículo', 'carro', 'moto', 'camión',
    )),
    CategoryRule('empleos', (
        'necesito', 'se necesita', 'busco personal', 'oportunidad laboral',
        'requiere personal', 'empleo',
    )),
    CategoryRule('servicios', (
        'servicio', 'reparación', 'mantenimiento', 'clases', 'profesor',
        'terapia', 'consultoría', 'asesoría',
    )),
    CategoryRule('productos', ('vendo',), exclusions=_REAL_ESTATE_SALES),
    CategoryRule('eventos', ('evento', 'fiesta', 'concierto', 'celebración')),
    CategoryRule('comunidad', ('comunidad', 'perdido', 'encontrado', 'donación')),
    CategoryRule('negocios', ('negocio', 'traspaso', 'inversión')),
)


def detect_category(title: str) -> str:
    """
    Detect the category of a publication from its title.

    Examples:
        >>> detect_category("Alquilo departamento en Wanchaq")
        'inmuebles'
        >>> detect_category("Vendo bicicleta montañera")
        'productos'
        >>> detect_category("Algo sin pistas")
        'productos'

    Args:
        title: Publication title

    Returns:
        Category name of the first matching rule, or 'productos'
    """
    if not title or not isinstance(title, str):
        return DEFAULT_CATEGORY

    lowered = title.lower()
    for rule in CATEGORY_RULES:
        if rule.matches(lowered):
            return rule.category
    return DEFAULT_CATEGORY
