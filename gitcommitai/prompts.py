"""Prompt templates for the git-commit-ai tool."""
from typing import List, Optional

from .models import ChatMessage

DIFF_PLACEHOLDER = "{{diff}}"

DEFAULT_SYSTEM_PROMPT = '''You are a helpful assistant that generates clear and concise git commit messages.
Follow the conventional commits format.

Message Format Rules:
1. Subject line: type(scope): description
   - Start with lowercase
   - Use imperative mood ("add" not "added")
   - No period at end
   - Max 50 characters
2. Leave one blank line after the subject
3. Optional body:
   - Explain WHY the change was made, not what changed
   - Wrap at 72 characters

Types: feat, fix, docs, style, refactor, test, chore

Reply with the commit message only, without quotes or code fences.
'''

DEFAULT_USER_PROMPT = '''Generate a concise git commit message for the following changes:

{{diff}}'''


def render_user_prompt(template: str, diff: str, context: Optional[str] = None) -> str:
    """Substitute the diff into the user template, verbatim."""
    prompt = template.replace(DIFF_PLACEHOLDER, diff)
    if context:
        prompt += f"\n\nAdditional context for these changes:\n{context}"
    return prompt


def render_system_prompt(template: str, rules: Optional[str] = None) -> str:
    if rules:
        return f"{template.rstrip()}\n\nAdditional rules:\n{rules}"
    return template


def build_messages(
    system_template: str,
    user_template: str,
    diff: str,
    rules: Optional[str] = None,
    context: Optional[str] = None,
) -> List[ChatMessage]:
    """Build the system and user messages for one generation request."""
    return [
        ChatMessage.system(render_system_prompt(system_template, rules)),
        ChatMessage.user(render_user_prompt(user_template, diff, context)),
    ]
