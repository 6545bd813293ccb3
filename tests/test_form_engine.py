import unittest
from types import SimpleNamespace

from homequote.schemas.questions import ConditionalDisplay
from homequote.services import form_engine
from homequote.utils.exceptions import ConditionalDisplayError


def question(question_id, step, order=0, rule=None, options=None, required=True, multi=False, **extra):
    values = dict(
        question_id=question_id,
        question_text=f"Question {question_id}",
        step_number=step,
        display_order_in_step=order,
        is_multiple_choice=options is not None,
        answer_options=options,
        allow_multiple_selections=multi,
        is_required=required,
        status="active",
        is_deleted=False,
        conditional_display=rule,
    )
    values.update(extra)
    return SimpleNamespace(**values)


def rule(depends_on, *values, operator="OR"):
    return {
        "dependent_on_question_id": depends_on,
        "show_when_answer_equals": list(values),
        "logical_operator": operator,
    }


class TestVisibility(unittest.TestCase):
    def setUp(self):
        self.fuel = question("fuel", 1, options=["Gas", "Oil", "Electric"])
        self.gas_meter = question("meter", 2, rule=rule("fuel", "Gas"), options=["Inside", "Outside"])
        self.meter_distance = question("distance", 3, rule=rule("meter", "Outside"), required=False)
        self.notes = question("notes", 3, order=1, required=False)
        self.questions = [self.notes, self.meter_distance, self.gas_meter, self.fuel]

    def ids(self, answers):
        return [q.question_id for q in form_engine.visible_questions(self.questions, answers)]

    def test_ordered_by_step_then_display_order(self):
        self.assertEqual(self.ids({"fuel": "Gas", "meter": "Outside"}), ["fuel", "meter", "distance", "notes"])

    def test_unanswered_dependency_hides_question(self):
        self.assertEqual(self.ids({}), ["fuel", "notes"])

    def test_non_matching_answer_hides_question(self):
        self.assertEqual(self.ids({"fuel": "Oil"}), ["fuel", "notes"])

    def test_hidden_branch_does_not_keep_dependents_visible(self):
        # "meter" still carries an answer, but it is hidden once fuel changes
        self.assertEqual(self.ids({"fuel": "Oil", "meter": "Outside"}), ["fuel", "notes"])

    def test_inactive_and_deleted_questions_are_never_visible(self):
        self.notes.status = "inactive"
        self.gas_meter.is_deleted = True
        self.assertEqual(self.ids({"fuel": "Gas", "meter": "Outside"}), ["fuel"])

    def test_active_steps_and_next_step(self):
        self.assertEqual(form_engine.active_steps(self.questions, {"fuel": "Oil"}), [1, 3])
        self.assertEqual(form_engine.next_step(self.questions, {"fuel": "Oil"}, 1), 3)
        self.assertEqual(form_engine.next_step(self.questions, {"fuel": "Gas"}, 1), 2)
        self.assertIsNone(form_engine.next_step(self.questions, {}, 3))


class TestRuleMatching(unittest.TestCase):
    def test_or_matches_any_expected_value(self):
        r = ConditionalDisplay(dependent_on_question_id="q", show_when_answer_equals=["A", "B"])
        self.assertTrue(form_engine.rule_matches(r, "B"))
        self.assertTrue(form_engine.rule_matches(r, ["C", "A"]))
        self.assertFalse(form_engine.rule_matches(r, "C"))

    def test_and_requires_every_expected_value_in_a_multi_select(self):
        r = ConditionalDisplay(dependent_on_question_id="q", show_when_answer_equals=["A", "B"], logical_operator="and")
        self.assertEqual(r.logical_operator, "AND")
        self.assertTrue(form_engine.rule_matches(r, ["A", "B", "C"]))
        self.assertFalse(form_engine.rule_matches(r, ["A"]))

    def test_empty_answers_never_match(self):
        r = ConditionalDisplay(dependent_on_question_id="q", show_when_answer_equals=["A"])
        for answer in (None, "", "   ", [], [None, ""]):
            self.assertFalse(form_engine.rule_matches(r, answer))

    def test_scalar_answers_compare_as_text(self):
        r = ConditionalDisplay(dependent_on_question_id="q", show_when_answer_equals=["3", "true"])
        self.assertTrue(form_engine.rule_matches(r, 3))
        self.assertTrue(form_engine.rule_matches(r, 3.0))
        self.assertTrue(form_engine.rule_matches(r, True))

    def test_object_answer_does_not_match(self):
        r = ConditionalDisplay(dependent_on_question_id="q", show_when_answer_equals=["A"])
        self.assertFalse(form_engine.rule_matches(r, {"value": "A"}))

    def test_malformed_stored_rule_hides_question(self):
        q = question("q2", 2, rule={"show_when_answer_equals": "not-a-list"})
        visible = form_engine.visible_questions([question("q1", 1), q], {"q1": "x"})
        self.assertEqual([v.question_id for v in visible], ["q1"])


class TestStepCompletion(unittest.TestCase):
    def setUp(self):
        self.questions = [
            question("type", 1, options=["Combi", "System"]),
            question("extras", 1, order=1, options=["Filter", "Thermostat"], multi=True, required=False),
            question("radiators", 2, rule=rule("type", "System")),
        ]

    def test_missing_required_in_step(self):
        missing = form_engine.missing_required(self.questions, {}, 1)
        self.assertEqual([q.question_id for q in missing], ["type"])
        self.assertTrue(form_engine.is_step_complete(self.questions, {"type": "Combi"}, 1))

    def test_hidden_required_question_does_not_block(self):
        self.assertTrue(form_engine.is_step_complete(self.questions, {"type": "Combi"}, 2))
        self.assertFalse(form_engine.is_step_complete(self.questions, {"type": "System"}, 2))

    def test_invalid_option_and_multiple_answers(self):
        errors = form_engine.validate_answers(self.questions, {"type": ["Combi", "System"], "extras": ["Filter", "Boat"]})
        messages = {(e.question_id, e.message) for e in errors}
        self.assertIn(("type", "Only one answer may be selected"), messages)
        self.assertIn(("extras", "Invalid option(s): Boat"), messages)

    def test_validation_can_be_limited_to_one_step(self):
        errors = form_engine.validate_answers(self.questions, {"type": "System"}, step=2)
        self.assertEqual([(e.question_id, e.message) for e in errors], [("radiators", "An answer is required")])

    def test_answers_to_hidden_questions_are_not_checked(self):
        self.assertEqual(form_engine.validate_answers(self.questions, {"type": "Combi", "radiators": ""}), [])


class TestAuthoringChecks(unittest.TestCase):
    def setUp(self):
        self.fuel = question("fuel", 1, options=["Gas", "Oil"])

    def check(self, step, values, dependency=None, question_id=None):
        r = ConditionalDisplay(dependent_on_question_id="fuel", show_when_answer_equals=values)
        form_engine.validate_conditional_display(step, r, dependency, question_id=question_id)

    def test_valid_rule(self):
        self.check(2, ["Gas"], self.fuel)

    def test_dependency_must_exist(self):
        with self.assertRaisesRegex(ConditionalDisplayError, "not found"):
            self.check(2, ["Gas"], None)
        self.fuel.is_deleted = True
        with self.assertRaisesRegex(ConditionalDisplayError, "not found"):
            self.check(2, ["Gas"], self.fuel)

    def test_dependency_must_be_on_earlier_step(self):
        with self.assertRaisesRegex(ConditionalDisplayError, "earlier step"):
            self.check(1, ["Gas"], self.fuel)

    def test_self_reference_rejected(self):
        with self.assertRaisesRegex(ConditionalDisplayError, "itself"):
            self.check(2, ["Gas"], self.fuel, question_id="fuel")

    def test_values_must_be_offered_by_dependency(self):
        with self.assertRaisesRegex(ConditionalDisplayError, "Electric"):
            self.check(2, ["Electric"], self.fuel)
        with self.assertRaisesRegex(ConditionalDisplayError, "at least one"):
            self.check(2, [], self.fuel)

    def test_dependents_of_skips_deleted(self):
        dependent = question("meter", 2, rule=rule("fuel", "Gas"))
        deleted = question("old", 2, rule=rule("fuel", "Oil"), is_deleted=True)
        result = form_engine.dependents_of("fuel", [self.fuel, dependent, deleted])
        self.assertEqual([q.question_id for q in result], ["meter"])

    def test_answers_by_text_labels_unknown_questions(self):
        labelled = form_engine.answers_by_text([self.fuel], {"fuel": "Gas", "ghost": "x"})
        self.assertEqual(labelled[0]["question_text"], "Question fuel")
        self.assertEqual(labelled[1]["question_text"], "Unknown Question")


if __name__ == "__main__":
    unittest.main()
