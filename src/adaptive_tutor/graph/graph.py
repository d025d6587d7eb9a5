"""Build the learning-cycle StateGraph.

``build_learning_cycle_graph()`` wires the stage nodes and conditional
edges into a compiled LangGraph::

    START -> plan | restore
    plan -> select_subtopic -> lesson -> quiz -> END | evaluate
    restore -> evaluate
    evaluate -> adapt -> replan -> END
"""

from typing import Any

from langgraph.graph import END, START, StateGraph

from adaptive_tutor.graph.edges import route_after_quiz, route_entry
from adaptive_tutor.graph.nodes import (
    make_adapt_node,
    make_evaluate_node,
    make_lesson_node,
    make_plan_node,
    make_quiz_node,
    make_replan_node,
    restore_node,
    select_subtopic_node,
)
from adaptive_tutor.graph.state import CycleState
from adaptive_tutor.services.adaptation import LearningAgent
from adaptive_tutor.services.lesson import LessonGenerator
from adaptive_tutor.services.planning import CurriculumPlanner
from adaptive_tutor.services.quiz import QuizEvaluator, QuizGenerator


def build_learning_cycle_graph(
    planner: CurriculumPlanner,
    lesson_generator: LessonGenerator,
    quiz_generator: QuizGenerator,
    quiz_evaluator: QuizEvaluator,
    learning_agent: LearningAgent,
    checkpointer: Any | None = None,
) -> Any:
    """Build and compile the learning-cycle StateGraph.

    Parameters
    ----------
    planner, lesson_generator, quiz_generator, quiz_evaluator, learning_agent:
        Stage services, injected into the nodes by closure.
    checkpointer:
        Optional LangGraph checkpointer for persistence.

    Returns
    -------
    CompiledStateGraph
        A compiled graph ready for ``.ainvoke()``.
    """
    graph = StateGraph(CycleState)

    graph.add_node("plan", make_plan_node(planner))
    graph.add_node("restore", restore_node)
    graph.add_node("select_subtopic", select_subtopic_node)
    graph.add_node("lesson", make_lesson_node(lesson_generator))
    graph.add_node("quiz", make_quiz_node(quiz_generator))
    graph.add_node("evaluate", make_evaluate_node(quiz_evaluator))
    graph.add_node("adapt", make_adapt_node(learning_agent))
    graph.add_node("replan", make_replan_node(planner))

    graph.add_conditional_edges(START, route_entry, {"plan": "plan", "restore": "restore"})
    graph.add_edge("plan", "select_subtopic")
    graph.add_edge("select_subtopic", "lesson")
    graph.add_edge("lesson", "quiz")
    graph.add_conditional_edges(
        "quiz",
        route_after_quiz,
        {"evaluate": "evaluate", "__end__": END},
    )
    graph.add_edge("restore", "evaluate")
    graph.add_edge("evaluate", "adapt")
    graph.add_edge("adapt", "replan")
    graph.add_edge("replan", END)

    compile_kwargs: dict[str, Any] = {}
    if checkpointer is not None:
        compile_kwargs["checkpointer"] = checkpointer
    return graph.compile(**compile_kwargs)
