PROJECT_SUMMARY_SYSTEM = (
    "You are a technical writer creating project descriptions for developer documentation."
)

PROJECT_SUMMARY_HUMAN = """Analyze this project and create a concise, professional project summary suitable for a changelog page.

Project Information:
- Technologies: {languages}
- Frameworks: {frameworks}
- Tools: {tools}

{readme}{key_files}Create a 2-3 paragraph project summary that:
1. First paragraph: Explain what the project is and its primary purpose
2. Second paragraph: Highlight key features and technical architecture
3. Optional third paragraph: Mention any notable integrations or unique aspects

Keep it professional, concise, and developer-focused. Write in plain text without any markdown formatting. Do not include installation instructions or getting started info."""
