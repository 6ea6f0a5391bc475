from typing import Callable

from langgraph.graph import END, StateGraph

from recruitment_hub.agents.nodes import match_scorer, profile_parser, text_extractor
from recruitment_hub.agents.state import CandidatePipelineState, has_failed
from recruitment_hub.core.models import UploadedDocument
from recruitment_hub.services.extraction import extract_text
from recruitment_hub.services.llm import LLMProvider


def _route_after_extract(state: CandidatePipelineState) -> str:
    if has_failed(state):
        return "end"
    return "parse"


def _route_after_parse(state: CandidatePipelineState) -> str:
    if has_failed(state):
        return "end"
    return "score"


def build_candidate_graph(
    llm_provider: LLMProvider,
    *,
    extractor: Callable[[UploadedDocument], str] = extract_text,
):
    graph = StateGraph(CandidatePipelineState)

    graph.add_node("extract", text_extractor.make_node(extractor))
    graph.add_node("parse", profile_parser.make_node(llm_provider))
    graph.add_node("score", match_scorer.make_node(llm_provider))

    graph.set_entry_point("extract")
    graph.add_conditional_edges(
        "extract",
        _route_after_extract,
        {
            "parse": "parse",
            "end": END,
        },
    )
    graph.add_conditional_edges(
        "parse",
        _route_after_parse,
        {
            "score": "score",
            "end": END,
        },
    )
    graph.add_edge("score", END)

    return graph.compile()
