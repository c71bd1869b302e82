"""
Default English text for message and hint keys.

The engine only emits keys; adapters (the HTTP layer, the suggestion prompt)
use this table to turn them into words. A UI is free to ship its own.
"""

from typing import Dict, Iterable, List, Optional

from coach.progression.schemas import MessageTemplate


MESSAGES: Dict[str, str] = {
    "progress.force_advance": "Maximum attempts reached. Moving forward with current progress.",
    "confirm.suggestion": "Nice pick. Keep it as is, refine it, or write your own?",
    "confirm.high_quality": "This is strong. Keep it and continue, or refine it further?",
    "confirm.medium_quality": "This works. One idea to make it stronger: {hint}",
    "confirm.accepted": "Saved. Moving on.",
    "coach.refine": "Let's build on this. {hint}",
    "coach.decline": "No problem, let's revise it together.",
    "help.ideas": "Here are a few directions to explore.",
    "help.examples": "Here are some examples to get you started.",
    "help.guidance": "Here is what makes a strong answer for this step.",
    "suggestion.unavailable": "No suggestion is available right now. You can still type your own answer.",
    "suggestion.ready": "Suggestions are ready.",
}

HINTS: Dict[str, str] = {
    "needs_more_detail": "Add a bit more detail so your students can picture it.",
    "wrong_form": "This step expects a different kind of answer.",
    "rephrase_as_statement": "Try stating it as a theme rather than asking a question.",
    "rephrase_as_question": "Try phrasing it as an open question students will investigate.",
    "too_abstract": "Make it more concrete for this age group.",
    "add_concrete_application": "Pair the theory with something students will actually do.",
    "consider_application": "Consider how students will apply this idea.",
    "explore_theoretical_dimensions": "Consider the theoretical lens behind this idea.",
    "connect_to_experience": "Connect it to something students experience.",
    "end_with_question_mark": "Finish it as a question.",
    "make_open_ended": "Make it open-ended so it can't be answered with yes or no.",
    "make_more_open_ended": "Try opening with 'How might' or 'What if'.",
    "add_theoretical_depth": "Add theoretical or philosophical depth.",
    "describe_student_action": "Describe what students will actually do.",
    "add_research_component": "Add a research or analysis component.",
    "name_authentic_audience": "Name a real audience for the work.",
    "break_into_steps": "Break it into clear phases or weeks.",
    "add_timeline": "Add a rough timeline.",
    "name_specific_resources": "Name specific materials, tools or experts.",
    "describe_what_students_create": "Describe what students create at each checkpoint.",
    "name_criteria_and_levels": "Name the criteria and the performance levels.",
    "name_assessment_methods": "Name how progress will be assessed (feedback, reflection, presentation).",
    "add_specific_detail": "Add one specific detail.",
    "not_ready_to_confirm": "This answer needs a little more work before we move on.",
}


def hint_text(key: str) -> str:
    return HINTS.get(key, key.replace("_", " "))


def hint_texts(keys: Iterable[str]) -> List[str]:
    return [hint_text(key) for key in keys]


def render(message: Optional[MessageTemplate]) -> str:
    """Render a message template with its parameters; hint params are expanded too."""
    if message is None:
        return ""
    template = MESSAGES.get(message.key, message.key)
    params = {name: hint_text(value) if name == "hint" else value for name, value in message.params.items()}
    try:
        return template.format(**params)
    except KeyError:
        return template
