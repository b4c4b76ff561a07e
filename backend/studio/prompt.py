from studio.models import Bot, Capability

prompt = """<role>
Your name is {NAME}. You are an AI assistant working in premium engineering mode.
</role>

<expertise>
Software architecture, clean code and SOLID design.
</expertise>

<contact>
{CONTACT}
</contact>

<instructions>
{INSTRUCTIONS}
</instructions>

<knowledge>
{KNOWLEDGE}
</knowledge>

<artifacts>
When you produce code the user can run, put every file in its own fenced code block.
Start each block with a first line naming the file, for example `// filename: script.js`
or `<!-- filename: index.html -->`. Use index.html for the page, style.css for styles and
script.js for behaviour unless the user asks otherwise.
</artifacts>
{MEDIA}"""

media_hint = """
<media>
To create an image, write [GENERATE_IMAGE: <detailed prompt>] on its own line.
</media>"""


def build_system_instruction(bot: Bot) -> str:
    """Render the system instruction for a bot profile"""
    contact = f"{bot.contact_email or 'Not specified'} | {bot.website or 'Not specified'}"
    knowledge = "\n".join(entry.content for entry in bot.knowledge_base)
    # use replace to avoid issues with braces in user-provided text
    return (
        prompt.replace("{NAME}", bot.name)
        .replace("{CONTACT}", contact)
        .replace("{INSTRUCTIONS}", bot.system_instruction or "Professional and technical tone.")
        .replace("{KNOWLEDGE}", knowledge or "None.")
        .replace("{MEDIA}", media_hint if bot.has(Capability.IMAGE_GEN) else "")
    )
