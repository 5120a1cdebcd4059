"""
Per-domain generation strategies.

Each creative domain is described once here: which customization keys it
understands (and what counts as "unset" for each), the ideas instructions,
image angle templates with their visual style, video templates and default
aspect ratios. Prompt building reads this table instead of branching on
the domain.

Template placeholders:
- {subject}: condensed ideas text or the domain's default subject
- {dominant}, {accent}: resolved palette color names
- {colors}: comma-separated palette color names
- {context}: customization context sentence (may be empty)
- {shot}: requested angle for domains without dedicated video templates
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from models import Domain, AspectRatio
from .themes import get_domain_themes


@dataclass(frozen=True)
class CustomizationField:
    """One allow-listed customization key."""
    key: str
    label: str
    unset: str = "Any"


@dataclass(frozen=True)
class ImageAngle:
    template: str
    style: str = "photorealistic"  # photorealistic, artistic or minimal


@dataclass(frozen=True)
class DomainStrategy:
    domain: Domain
    expertise: str
    default_subject: str
    ideas_instructions: str
    customization_fields: Tuple[CustomizationField, ...]
    image_angles: Dict[str, ImageAngle]
    default_image: ImageAngle
    default_video: str
    video_angles: Dict[str, str] = field(default_factory=dict)
    image_aspect: AspectRatio = AspectRatio.SQUARE
    video_aspect: AspectRatio = AspectRatio.PORTRAIT

    @property
    def angle_names(self) -> List[str]:
        return list(self.image_angles.keys())


# Shared by every domain; controls the ideas word range only
TEXT_LENGTH_KEY = "text_length"
DEFAULT_TEXT_LENGTH = "300-500"


DOMAIN_STRATEGIES: Dict[Domain, DomainStrategy] = {
    Domain.COOKING: DomainStrategy(
        domain=Domain.COOKING,
        expertise="culinary arts and cooking",
        default_subject="a signature dish",
        ideas_instructions=(
            "Create a detailed dish concept including: dish name, description, key ingredients, "
            "plating suggestions, and cooking techniques. Focus on how the colors inspire the "
            "flavors and presentation."
        ),
        customization_fields=(
            CustomizationField("dish_type", "Dish type", "Chef's choice"),
            CustomizationField("cuisine_style", "Cuisine style"),
            CustomizationField("primary_cooking_method", "Cooking method"),
            CustomizationField("dietary_needs", "Dietary needs"),
        ),
        image_angles={
            "Dish Plated": ImageAngle(
                "Professional food photography of {subject}. Beautiful plating on elegant dishware. "
                "Colors emphasizing {dominant} tones with {accent} accents. Cinematic lighting, "
                "shallow depth of field, appetizing presentation."
            ),
            "Artistic Ingredients": ImageAngle(
                "Artistic flat lay arrangement of ingredients for {subject}. Clean background, "
                "beautiful composition using colors from palette: {colors}. High-end food styling."
            ),
            "Cooking Process": ImageAngle(
                "Dynamic cooking action shot preparing {subject}. Professional kitchen setting, "
                "steam and movement, colors inspired by {colors}. Realistic cooking photography."
            ),
            "Concept Sketch": ImageAngle(
                "Beautiful culinary illustration concept sketch of {subject}. Watercolor and ink "
                "style, showing plating and presentation. Color palette: {colors}.",
                style="artistic",
            ),
        },
        default_image=ImageAngle("Professional food photography of {subject} using colors: {colors}."),
        video_angles={
            "Dish Plated": (
                "Professional culinary video of elegant dish plating.{context} Beautiful presentation "
                "emphasizing {dominant} tones with {accent} accents. Cinematic food styling, dramatic "
                "lighting, appetizing close-ups. Colors: {colors}. Smooth plating motions, artistic "
                "arrangement."
            ),
            "Cooking Process": (
                "Dynamic cooking process video.{context} Professional kitchen action, sizzling and "
                "steam, chef's hands working. Colors inspired by {colors}, emphasizing {dominant} and "
                "{accent}. Realistic cooking cinematography."
            ),
            "Artistic Ingredients": (
                "Artistic ingredient arrangement video.{context} Fresh ingredients floating and "
                "arranging themselves, featuring colors {colors}. Magical food styling, clean "
                "background, professional food photography motion."
            ),
        },
        default_video=(
            "Culinary concept video.{context} Beautiful food presentation featuring colors {colors}, "
            "emphasizing {dominant} with {accent} accents. Professional food cinematography."
        ),
        image_aspect=AspectRatio.SQUARE,
        video_aspect=AspectRatio.PORTRAIT,
    ),
    Domain.FASHION: DomainStrategy(
        domain=Domain.FASHION,
        expertise="fashion design and styling",
        default_subject="a signature outfit",
        ideas_instructions=(
            "Create a complete outfit concept including: style description, key pieces, fabric "
            "suggestions, accessories, and styling tips. Explain how each color can be incorporated "
            "into the look."
        ),
        customization_fields=(
            CustomizationField("style_preference", "Style"),
            CustomizationField("season", "Season"),
            CustomizationField("key_garment", "Key garment"),
            CustomizationField("fabric_texture", "Fabric focus"),
        ),
        image_angles={
            "Full Outfit Look": ImageAngle(
                "High fashion photography of complete outfit inspired by {subject}. Model wearing "
                "coordinated pieces in colors: {colors}. Professional fashion photography, clean "
                "background."
            ),
            "Flat Lay Styling": ImageAngle(
                "Luxury fashion flat lay styling of {subject}. Arranged on marble surface, using color "
                "palette: {colors}. High-end fashion photography style."
            ),
            "Fabric/Detail Focus": ImageAngle(
                "Close-up detailed shot of fabric textures and details from {subject}. Emphasizing "
                "{dominant} with {accent} details. Macro fashion photography."
            ),
            "Fashion Illustration": ImageAngle(
                "Elegant fashion illustration of {subject}. Watercolor and ink style, featuring "
                "colors: {colors}. Modern fashion sketch aesthetic.",
                style="artistic",
            ),
        },
        default_image=ImageAngle("High fashion photography of {subject} using colors: {colors}."),
        video_angles={
            "Full Outfit Look": (
                "High fashion video showcasing complete outfit.{context} Model presenting coordinated "
                "pieces in colors {colors}. Professional fashion cinematography, elegant movement, "
                "clean background."
            ),
            "Fabric/Detail Focus": (
                "Close-up fashion detail video.{context} Macro shots of fabric textures and details, "
                "emphasizing {dominant} with {accent} highlights. Luxury fashion cinematography."
            ),
        },
        default_video=(
            "Fashion concept video.{context} Elegant styling featuring colors {colors}, professional "
            "fashion photography in motion."
        ),
        image_aspect=AspectRatio.PORTRAIT,
        video_aspect=AspectRatio.PORTRAIT,
    ),
    Domain.INTERIOR: DomainStrategy(
        domain=Domain.INTERIOR,
        expertise="interior design and home decor",
        default_subject="a styled living space",
        ideas_instructions=(
            "Create a complete room design concept including: color scheme application, furniture "
            "suggestions, materials and textures, lighting ideas, and decorative elements."
        ),
        customization_fields=(
            CustomizationField("room_type", "Room", "Any Room"),
            CustomizationField("design_style", "Style", "Any Style"),
            CustomizationField("budget_range", "Budget", "Any Budget"),
        ),
        image_angles={
            "Room Perspective View": ImageAngle(
                "Stunning interior design photography of {subject}. Wide angle room view showcasing "
                "color scheme: {colors}. Professional architectural photography, natural lighting."
            ),
            "Mood Board / Style Tile": ImageAngle(
                "Interior design mood board for {subject}. Collage style showing materials, textures, "
                "and colors: {colors}. Design presentation style.",
                style="artistic",
            ),
            "Color Vignette": ImageAngle(
                "Detailed interior vignette showcasing {subject}. Focus on color harmony using "
                "{colors}. Cozy corner or styled surface, lifestyle photography."
            ),
            "Blueprint/Sketch with Color": ImageAngle(
                "Architectural sketch with color wash of {subject}. Technical drawing style with "
                "watercolor accents in {colors}. Design presentation aesthetic.",
                style="artistic",
            ),
        },
        default_image=ImageAngle("Interior design photography of {subject} using colors: {colors}."),
        video_angles={
            "Room Perspective View": (
                "Cinematic interior design walkthrough.{context} Wide angle room reveal showcasing "
                "color scheme {colors}. Professional architectural videography, natural lighting, "
                "smooth camera movement."
            ),
        },
        default_video=(
            "Interior design concept video.{context} Beautiful space featuring colors {colors}, "
            "architectural cinematography."
        ),
        image_aspect=AspectRatio.LANDSCAPE,
        video_aspect=AspectRatio.LANDSCAPE,
    ),
    Domain.ART: DomainStrategy(
        domain=Domain.ART,
        expertise="art and craft creation",
        default_subject="an original artwork",
        ideas_instructions=(
            "Create a detailed art project concept including: artistic vision, techniques to use, "
            "materials needed, composition ideas, and step-by-step creative process."
        ),
        customization_fields=(
            CustomizationField("art_medium", "Medium", "Any Medium"),
            CustomizationField("artistic_style", "Style", "Any Style"),
            CustomizationField("skill_level", "Skill Level", "Any Complexity"),
            CustomizationField("subject_matter", "Subject", "Any Subject"),
            CustomizationField("art_color_scheme", "Color Scheme", "Any Colors"),
            CustomizationField("art_purpose", "Purpose", "Any Purpose"),
        ),
        image_angles={
            "Finished Artwork": ImageAngle(
                "Completed artwork inspired by {subject}. Fine art piece featuring color palette: "
                "{colors}. Gallery lighting, artistic composition.",
                style="artistic",
            ),
            "Studio Context": ImageAngle(
                "Artist studio scene with {subject} in progress. Creative workspace with art "
                "supplies, natural lighting, colors: {colors}."
            ),
            "Material/Texture Focus": ImageAngle(
                "Close-up macro shot of art materials and textures for {subject}. Paint, brushes, "
                "canvas textures in colors: {colors}."
            ),
            "Concept Sketchbook": ImageAngle(
                "Open sketchbook showing concept drawings for {subject}. Hand-drawn sketches with "
                "color notes, featuring palette: {colors}.",
                style="artistic",
            ),
        },
        default_image=ImageAngle("Artistic creation of {subject} using colors: {colors}.", style="artistic"),
        video_angles={
            "Finished Artwork": (
                "Art creation video showcasing finished piece.{context} Gallery-quality artwork "
                "featuring {colors}. Artistic cinematography, dramatic lighting, creative composition."
            ),
            "Studio Context": (
                "Artist studio video.{context} Creative workspace with art in progress, natural "
                "lighting, colors {colors}. Documentary-style artistic cinematography."
            ),
        },
        default_video=(
            "Art concept video.{context} Creative artwork featuring colors {colors}, artistic "
            "cinematography."
        ),
        image_aspect=AspectRatio.SQUARE,
        video_aspect=AspectRatio.PORTRAIT,
    ),
    Domain.MAKEUP: DomainStrategy(
        domain=Domain.MAKEUP,
        expertise="makeup artistry and beauty",
        default_subject="a signature makeup look",
        ideas_instructions=(
            "Create a complete makeup look concept including: color placement, techniques, product "
            "suggestions, and application tips. Explain how to use each color in the palette."
        ),
        customization_fields=(
            CustomizationField("makeup_style", "Makeup style", "Any Look"),
            CustomizationField("occasion", "Occasion", "Any Occasion"),
            CustomizationField("focus_feature", "Focus feature", "Balanced Look"),
            CustomizationField("color_scheme", "Color scheme", "Any Colors"),
            CustomizationField("intensity_level", "Intensity", "Any Intensity"),
            CustomizationField("age_group", "Age group", "Any Age"),
        ),
        image_angles={
            "Close-up Beauty Shot": ImageAngle(
                "Professional beauty photography close-up of {subject}. Flawless makeup featuring "
                "colors: {colors}. Studio lighting, high detail."
            ),
            "Full Face Look": ImageAngle(
                "Full face beauty portrait showcasing {subject}. Complete makeup look using color "
                "palette: {colors}. Professional beauty photography."
            ),
            "Product Swatch Art": ImageAngle(
                "Artistic makeup product swatches and color story for {subject}. Beautiful "
                "arrangement on marble surface, colors: {colors}.",
                style="artistic",
            ),
            "Makeup Chart/Illustration": ImageAngle(
                "Professional makeup chart illustration for {subject}. Beauty diagram style showing "
                "color placement, palette: {colors}.",
                style="artistic",
            ),
        },
        default_image=ImageAngle("Beauty photography of {subject} using colors: {colors}."),
        default_video=(
            "Professional makeup video.{context}{shot} Beautiful makeup application showcasing "
            "colors {colors}, emphasizing {dominant} with {accent} accents. Beauty cinematography, "
            "perfect lighting."
        ),
        image_aspect=AspectRatio.SQUARE,
        video_aspect=AspectRatio.PORTRAIT,
    ),
    Domain.EVENT: DomainStrategy(
        domain=Domain.EVENT,
        expertise="event planning and design",
        default_subject="a themed celebration",
        ideas_instructions=(
            "Create a comprehensive event theme concept including: overall aesthetic, decoration "
            "ideas, table settings, lighting, floral arrangements, and guest experience elements."
        ),
        customization_fields=(
            CustomizationField("event_type", "Event", "Any Event"),
            CustomizationField("atmosphere", "Atmosphere", "Any Atmosphere"),
            CustomizationField("event_size", "Size", "Any Size"),
            CustomizationField("event_color_theme", "Color theme", "Any Colors"),
            CustomizationField("venue_type", "Venue", "Any Venue"),
            CustomizationField("event_budget", "Budget", "Any Budget"),
        ),
        image_angles={
            "Table Setting Detail": ImageAngle(
                "Elegant table setting detail for {subject}. Luxury event styling using color "
                "scheme: {colors}. Professional event photography."
            ),
            "Overall Venue Atmosphere": ImageAngle(
                "Wide shot of event venue decorated for {subject}. Atmospheric lighting, full "
                "decoration scheme in colors: {colors}. Event photography."
            ),
            "Decor Vignette": ImageAngle(
                "Beautiful decorative vignette for {subject}. Styled detail shot featuring color "
                "palette: {colors}. Event styling photography."
            ),
            "Invitation Suite Mockup": ImageAngle(
                "Luxury invitation suite mockup for {subject}. Flat lay of stationery and decor "
                "elements, colors: {colors}. High-end design photography."
            ),
        },
        default_image=ImageAngle("Event styling photography of {subject} using colors: {colors}."),
        default_video=(
            "Event design video.{context}{shot} Beautiful event setup featuring color palette "
            "{colors}. Professional event cinematography, elegant atmosphere."
        ),
        image_aspect=AspectRatio.LANDSCAPE,
        video_aspect=AspectRatio.LANDSCAPE,
    ),
    Domain.DESIGN: DomainStrategy(
        domain=Domain.DESIGN,
        expertise="graphic and web design",
        default_subject="a brand identity project",
        ideas_instructions=(
            "Create a complete design concept including: visual hierarchy, typography suggestions, "
            "layout ideas, brand applications, and user experience considerations."
        ),
        customization_fields=(
            CustomizationField("project_type", "Project", "Any Project"),
            CustomizationField("design_approach", "Design style", "Any Style"),
            CustomizationField("target_industry", "Industry", "Any Industry"),
            CustomizationField("color_palette", "Color palette", "Any Colors"),
            CustomizationField("complexity_level", "Complexity", "Any Complexity"),
            CustomizationField("target_audience", "Target audience", "Any Audience"),
        ),
        image_angles={
            "UI Mockup (Website/App)": ImageAngle(
                "Modern website/app UI mockup for {subject}. Clean interface design using color "
                "palette: {colors}. Contemporary web design, minimal aesthetic.",
                style="minimal",
            ),
            "Brand Application Mockup": ImageAngle(
                "Brand identity mockup showing {subject}. Logo applications on various materials, "
                "color scheme: {colors}. Professional branding presentation.",
                style="minimal",
            ),
            "Abstract Color Background": ImageAngle(
                "Abstract geometric background design for {subject}. Modern gradient and shape "
                "composition using colors: {colors}. Digital art style.",
                style="artistic",
            ),
            "Style Guide Snippet": ImageAngle(
                "Brand style guide page showing {subject}. Typography, colors, and design elements "
                "featuring palette: {colors}. Design documentation style.",
                style="minimal",
            ),
        },
        default_image=ImageAngle("Graphic design mockup of {subject} using colors: {colors}.", style="minimal"),
        default_video=(
            "Design concept video.{context}{shot} Modern graphic design elements featuring colors "
            "{colors}. Professional motion graphics style, clean composition."
        ),
        image_aspect=AspectRatio.LANDSCAPE,
        video_aspect=AspectRatio.LANDSCAPE,
    ),
}


def get_strategy(domain: Domain) -> DomainStrategy:
    """Get the generation strategy for a domain."""
    return DOMAIN_STRATEGIES[domain]


def get_domain_options() -> List[Dict]:
    """Describe every domain for client dropdowns."""
    options = []
    for domain, strategy in DOMAIN_STRATEGIES.items():
        themes = get_domain_themes(domain)
        options.append({
            "domain": domain.value,
            "image_angles": strategy.angle_names,
            "customizations": [
                {"key": f.key, "label": f.label, "unset": f.unset}
                for f in strategy.customization_fields
            ],
            "default_image_aspect_ratio": strategy.image_aspect.value,
            "default_video_aspect_ratio": strategy.video_aspect.value,
            "series_themes": [
                {"id": t.id, "label": t.label, "description": t.description}
                for t in themes.themes
            ],
        })
    return options
