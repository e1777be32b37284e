SYSTEM_PROMPT = (
    "You name dog walking routes. Titles are catchy, specific to the location "
    "features and appealing to dog owners."
)

TITLE_PROMPT_TEMPLATE = """Generate creative, descriptive titles for these {count} dog walking routes.

Context:
- Pets: {pets}
- Preferences: {preferences}
- Target: {target}

Routes to name:
{routes}

Respond with ONLY a JSON array of {count} route titles, for example:
["Riverside Park Adventure Loop", "Quiet Neighborhood Discovery Walk"]"""
