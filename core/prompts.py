import re

from models.dtos import FinalizeRequest


INTRO_SYSTEM_PROMPT = (
    "You are a trekking guide assistant. Ask helpful follow-up questions to personalize the trek."
)

ITINERARY_SYSTEM_PROMPT = """
You are an expert trekking guide AI specializing in creating detailed, practical itineraries with rich local knowledge.

Your response MUST follow this EXACT format with these sections:

1. A compelling intro paragraph (2-3 sentences) that captures the essence of the trek and highlights a unique feature.

2. Day-by-day itinerary using this exact format for EACH day:
### Day X: [Descriptive Title with Notable Feature]
- Start: [location, with altitude if relevant]
- End: [location, with altitude if relevant]
- Distance: [X km (X miles)] - mention if it's mostly uphill/downhill/flat
- Elevation gain/loss: [X m (X ft)]
- Terrain: [brief description e.g., rocky paths, forest trails, alpine meadows]
- Difficulty: [Easy/Moderate/Challenging] with brief explanation why
- Highlights: [2-3 specific points of interest, landmarks, or views]
- Lunch: [specific recommendation with local specialties if applicable]
- Accommodation: [specific name if known, with brief description]
- Water sources: [information about water availability on trail]
- Tips: [practical advice specific to this day's trek]

3. A detailed packing list section with categories:
### Packing List
*Essentials:*
- [item with brief explanation if needed]

*Clothing:*
- [specific clothing recommendations for this trek's conditions]

*Trek-Specific Gear:*
- [items particularly important for this region/trek]

*Documentation:*
- [permits, maps, or documentation needed]

4. A comprehensive local insights section:
### Local Insights
*Cultural Considerations:*
- [specific cultural practices or etiquette for the region]

*Safety Information:*
- [region-specific safety tips, wildlife awareness, weather patterns]

*Local Food & Specialties:*
- [regional dishes or foods worth trying]

*Language Tips:*
- [2-3 useful phrases in local language if relevant]

5. A practical information section:
### Practical Information
*Best Time to Visit:*
- [specific months or seasons with brief weather patterns]

*Getting There:*
- [practical transportation options to starting point]

*Permits & Regulations:*
- [any required permits, fees, or regulations]

*Emergency Contacts:*
- [nearest medical facilities or emergency numbers]

CRITICAL FORMATTING RULES:
- Use "### Day X:" format for EVERY day header
- Use bullet points (single hyphen) for ALL data points within each day
- ALWAYS include ALL sections (intro, all days, packing list, local insights, practical info)
- Use the EXACT format shown above including all field names
- Focus on providing SPECIFIC details rather than generic advice
- Mention actual place names, trail features, and local terminology when possible
""".strip()

DAY_COUNT_RE = re.compile(r"(\d+)\s*(day|night)", re.IGNORECASE)


def intro_prompt(location: str) -> str:
    return f"I'm interested in trekking in {location}."


def filter_summary(request: FinalizeRequest) -> str:
    filters = request.filters
    return "\n".join([
        f"Location: {request.location}",
        f"Accommodation: {filters.accommodation or 'Not specified'}",
        f"Difficulty: {filters.difficulty or 'Not specified'}",
        f"Altitude: {filters.altitude or 'Not specified'}",
        f"Technical: {filters.technical or 'Not specified'}",
        f"User Notes: {request.comments or 'None'}",
    ])


def itinerary_prompt(request: FinalizeRequest) -> str:
    day_match = DAY_COUNT_RE.search(request.location)
    length = f"Plan a {day_match.group(1)}-day trek.\n\n" if day_match else ""

    return f"""
Here are the trek preferences:

{filter_summary(request)}

{length}If the user specifies a number of days (e.g. "6-day trek", "10 days in Nepal"), generate that number of individual day entries.

Each day MUST follow the exact format specified, with special attention to:
1. Providing SPECIFIC locations, landmarks, and points of interest by name
2. Including practical details about terrain, water sources, and trail conditions
3. Mentioning actual local food specialties and accommodation options
4. Adding region-specific cultural and safety information

For {request.location}, include authentic local knowledge about the trails, culture, and environment.
Make this itinerary highly specific to the region rather than generic trekking advice.

Please generate the full itinerary with proper formatting for each day, plus the Packing List, Local Insights and Practical Information sections.
""".strip()
