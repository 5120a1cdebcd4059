"""
Image series themes per domain.

Every domain has an auto theme (used for "auto" and for unknown theme ids)
plus a short list of selectable themes. Templates take {context} and
{colors}.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from models import Domain, AspectRatio


@dataclass(frozen=True)
class SeriesTheme:
    id: str
    label: str
    description: str
    min_size: int
    max_size: int
    default_size: int
    preferred_aspect: AspectRatio
    template: str


@dataclass(frozen=True)
class DomainThemes:
    auto: SeriesTheme
    themes: Tuple[SeriesTheme, ...]


AUTO_THEME_ID = "auto"


def _theme(id, label, description, sizes, aspect, template) -> SeriesTheme:
    low, high, default = sizes
    return SeriesTheme(id, label, description, low, high, default, aspect, template)


SERIES_THEMES: Dict[Domain, DomainThemes] = {
    Domain.COOKING: DomainThemes(
        auto=_theme(
            "menu-catalog", "Restaurant Menu Catalog",
            "Professional dish photography for menus and promotion",
            (5, 8, 6), AspectRatio.LANDSCAPE,
            "Professional restaurant menu photography series. {context}. Signature dish showcase with "
            "cinematic lighting, 45° angle, minimalist styling. Clean backgrounds, authentic "
            "presentation. Colors: {colors}.",
        ),
        themes=(
            _theme(
                "menu-catalog", "Restaurant Menu Catalog", "Professional dish photography for menus",
                (5, 8, 6), AspectRatio.LANDSCAPE,
                "Professional restaurant menu photography series. {context}. Signature dish showcase "
                "with cinematic lighting, 45° angle, minimalist styling. Colors: {colors}.",
            ),
            _theme(
                "social-content", "Social Media Series", "Behind-the-scenes and flat lay content",
                (3, 5, 4), AspectRatio.PORTRAIT,
                "Social media food content series. {context}. Authentic cooking process, flat lay "
                "ingredients, overhead shots. Vertical mobile-first composition. Colors: {colors}.",
            ),
            _theme(
                "recipe-story", "Recipe Story Progression", "Ingredient to final dish journey",
                (4, 6, 5), AspectRatio.SQUARE,
                "Recipe story photography series. {context}. Ingredient sourcing, preparation steps, "
                "cooking process, final plated presentation. Square format for versatility. "
                "Colors: {colors}.",
            ),
        ),
    ),
    Domain.FASHION: DomainThemes(
        auto=_theme(
            "lookbook", "Model Lookbook", "Editorial fashion portraits with generous negative space",
            (6, 10, 8), AspectRatio.PORTRAIT,
            "Editorial fashion lookbook series. {context}. Vertical portrait framing, generous "
            "negative space, authentic emotion. Professional model photography, natural lighting. "
            "Colors: {colors}.",
        ),
        themes=(
            _theme(
                "lookbook", "Model Lookbook", "Editorial fashion portraits",
                (6, 10, 8), AspectRatio.PORTRAIT,
                "Editorial fashion lookbook series. {context}. Vertical portrait framing, generous "
                "negative space, authentic emotion. Colors: {colors}.",
            ),
            _theme(
                "product-catalog", "Product Catalog", "Fabric details and styling variations",
                (5, 8, 6), AspectRatio.PORTRAIT,
                "Fashion product catalog series. {context}. Close-up fabric textures, styling "
                "variations, detail showcase. Vertical composition. Colors: {colors}.",
            ),
            _theme(
                "flat-lay", "Flat Lay Styling", "Outfit components arranged artistically",
                (3, 5, 4), AspectRatio.SQUARE,
                "Fashion flat lay series. {context}. Outfit components arranged artistically, "
                "overhead shots, clean backgrounds. Square composition. Colors: {colors}.",
            ),
        ),
    ),
    Domain.INTERIOR: DomainThemes(
        auto=_theme(
            "magazine-spread", "Magazine Portfolio Spread", "Professional room photography for editorial",
            (5, 8, 6), AspectRatio.LANDSCAPE,
            "Interior design magazine series. {context}. Wide-angle room photography, natural "
            "lighting, clean minimalist presentation. Horizontal landscape format. Colors: {colors}.",
        ),
        themes=(
            _theme(
                "magazine-spread", "Magazine Portfolio", "Professional room photography",
                (5, 8, 6), AspectRatio.LANDSCAPE,
                "Interior design magazine series. {context}. Wide-angle room views, architectural "
                "photography, authentic lived-in spaces. Colors: {colors}.",
            ),
            _theme(
                "transformation", "Room Transformation", "Before, during, after renovation",
                (4, 6, 5), AspectRatio.LANDSCAPE,
                "Room transformation series. {context}. Same space evolution, renovation journey, "
                "design progression. Horizontal format. Colors: {colors}.",
            ),
            _theme(
                "vignettes", "Styling Vignettes", "Corner details and arrangements",
                (4, 6, 5), AspectRatio.PORTRAIT,
                "Interior styling vignette series. {context}. Corner details, shelf arrangements, "
                "decorative elements. Vertical composition. Colors: {colors}.",
            ),
        ),
    ),
    Domain.ART: DomainThemes(
        auto=_theme(
            "portfolio", "Portfolio Showcase", "Curated best works collection",
            (8, 12, 10), AspectRatio.SQUARE,
            "Art portfolio showcase series. {context}. Gallery-quality artwork presentation, studio "
            "lighting, authentic artistic process. Square format for uniformity. Colors: {colors}.",
        ),
        themes=(
            _theme(
                "portfolio", "Portfolio Showcase", "Best works collection",
                (8, 12, 10), AspectRatio.SQUARE,
                "Art portfolio series. {context}. Curated best works, diverse techniques, "
                "professional gallery presentation. Colors: {colors}.",
            ),
            _theme(
                "process", "Process Documentation", "Sketch to finished artwork",
                (6, 8, 7), AspectRatio.SQUARE,
                "Art creation process series. {context}. Sketches, work-in-progress stages, final "
                "artwork. Documentary style. Colors: {colors}.",
            ),
            _theme(
                "exhibition", "Gallery Exhibition", "Thematic art collection",
                (5, 10, 7), AspectRatio.SQUARE,
                "Gallery exhibition series. {context}. Thematic artwork collection, unified concept, "
                "professional lighting. Colors: {colors}.",
            ),
        ),
    ),
    Domain.MAKEUP: DomainThemes(
        auto=_theme(
            "tutorial", "Tutorial Series", "Step-by-step makeup application",
            (5, 8, 6), AspectRatio.PORTRAIT,
            "Makeup tutorial series. {context}. Step-by-step application progression, beauty "
            "close-ups, perfect lighting. Vertical portrait format. Colors: {colors}.",
        ),
        themes=(
            _theme(
                "tutorial", "Tutorial Series", "Step-by-step application",
                (5, 8, 6), AspectRatio.PORTRAIT,
                "Makeup tutorial series. {context}. Application steps, transformation stages, beauty "
                "photography. Vertical format. Colors: {colors}.",
            ),
            _theme(
                "product-campaign", "Product Campaign", "Color swatches and beauty shots",
                (3, 6, 4), AspectRatio.SQUARE,
                "Makeup product campaign series. {context}. Color swatches, product arrangements, "
                "beauty close-ups. Square format. Colors: {colors}.",
            ),
            _theme(
                "transformation", "Day to Night", "Natural to dramatic looks",
                (4, 6, 5), AspectRatio.PORTRAIT,
                "Makeup transformation series. {context}. Natural daytime to dramatic evening "
                "evolution. Vertical beauty photography. Colors: {colors}.",
            ),
        ),
    ),
    Domain.EVENT: DomainThemes(
        auto=_theme(
            "wedding", "Wedding Photography", "Ceremony and reception moments",
            (8, 15, 10), AspectRatio.LANDSCAPE,
            "Wedding photography series. {context}. Candid documentary style, emotional moments, "
            "authentic celebration. Horizontal format for venues. Colors: {colors}.",
        ),
        themes=(
            _theme(
                "wedding", "Wedding Collection", "Ceremony and reception",
                (8, 15, 10), AspectRatio.LANDSCAPE,
                "Wedding photography series. {context}. Ceremony moments, reception details, candid "
                "emotions. Documentary style. Colors: {colors}.",
            ),
            _theme(
                "corporate", "Corporate Event", "Professional event coverage",
                (5, 10, 7), AspectRatio.LANDSCAPE,
                "Corporate event series. {context}. Professional networking, brand integration, "
                "event storytelling. Horizontal format. Colors: {colors}.",
            ),
            _theme(
                "party", "Themed Party", "Decoration and atmosphere",
                (4, 8, 6), AspectRatio.LANDSCAPE,
                "Themed party series. {context}. Decoration showcase, color scheme execution, "
                "celebration atmosphere. Colors: {colors}.",
            ),
        ),
    ),
    Domain.DESIGN: DomainThemes(
        auto=_theme(
            "brand-identity", "Brand Identity Package", "Logo applications and guidelines",
            (6, 12, 8), AspectRatio.LANDSCAPE,
            "Brand identity series. {context}. Logo applications, mockups, brand guidelines, design "
            "system. Horizontal presentation format. Colors: {colors}.",
        ),
        themes=(
            _theme(
                "brand-identity", "Brand Identity", "Complete brand system",
                (6, 12, 8), AspectRatio.LANDSCAPE,
                "Brand identity series. {context}. Logo mockups, business cards, marketing materials, "
                "brand applications. Colors: {colors}.",
            ),
            _theme(
                "ui-portfolio", "UI/UX Portfolio", "App and website designs",
                (5, 8, 6), AspectRatio.LANDSCAPE,
                "UI/UX portfolio series. {context}. Website designs, app interfaces, user flows, "
                "responsive mockups. Colors: {colors}.",
            ),
            _theme(
                "social-campaign", "Social Campaign", "Multi-platform graphics",
                (4, 6, 5), AspectRatio.SQUARE,
                "Social media campaign series. {context}. Multi-platform graphics, cohesive visual "
                "theme, modern design. Colors: {colors}.",
            ),
        ),
    ),
}


def get_domain_themes(domain: Domain) -> DomainThemes:
    return SERIES_THEMES[domain]


def get_theme(domain: Domain, theme_id: str) -> SeriesTheme:
    """Resolve a theme id; 'auto' and unknown ids resolve to the auto theme."""
    domain_themes = get_domain_themes(domain)
    if theme_id == AUTO_THEME_ID:
        return domain_themes.auto
    for theme in domain_themes.themes:
        if theme.id == theme_id:
            return theme
    return domain_themes.auto
