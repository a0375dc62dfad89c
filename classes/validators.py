from classes.errors import ResponseValidationError


def parse_answer(value):
    """Accept null, an int, or a string of digits. Anything else is malformed."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ResponseValidationError("Answer must be an option index or null.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return None
        if text.isdigit():
            return int(text)
    raise ResponseValidationError("Answer must be an option index or null.")


def validate_responses(responses, question_ids):
    """Turn a submitted response list into {question_id: selected option}.

    Every item must reference a question of the attempt's snapshot, at most once.
    """
    if responses is None:
        return {}
    if not isinstance(responses, list):
        raise ResponseValidationError("Responses must be a list.")

    answers = {}
    for item in responses:
        if not isinstance(item, dict):
            raise ResponseValidationError("Each response must be an object.")

        question_id = item.get("question_id")
        if isinstance(question_id, bool) or not isinstance(question_id, int):
            raise ResponseValidationError("Each response needs an integer 'question_id'.")
        if question_id not in question_ids:
            raise ResponseValidationError(f"Question {question_id} is not part of this attempt.")
        if question_id in answers:
            raise ResponseValidationError(f"Question {question_id} was answered more than once.")

        answers[question_id] = parse_answer(item.get("answer"))
    return answers
