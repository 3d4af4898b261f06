"""
Weighted bipartite matching of pending offer and seek requests.

Each (request, timeslot) pair becomes a vertex; offers form the left side and
seeks the right side. Edges join vertices with the same timeslot whose
requests satisfy the hard constraints, weighted by preference quality. A
maximum-weight matching is solved as a 0/1 program with PuLP, then a greedy
pass in weight order drops pairings that would double-book a participant.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

import pulp
from sqlalchemy.orm import Session

from ..config import MAX_LEVEL_GAP
from ..domain.requests.repository import RequestRepository
from ..models import (
    PairingRequest,
    Participant,
    ParticipantRole,
    RequestIntent,
    RequestStatus,
    Track,
)
from .clock import Clock, get_clock
from .timeslot_calendar import monday_of_week

logger = logging.getLogger(__name__)

BASE_WEIGHT = 100.0
TRACK_BONUS = 50.0
# level difference (tutor - tutee) → bonus; 1 year ahead is the sweet spot
LEVEL_PROXIMITY_BONUS = {1: 30.0, 0: 25.0, 2: 20.0, 3: 15.0, 4: 10.0}


@dataclass(frozen=True)
class CandidateVertex:
    """One candidate timeslot of one pending request"""

    request: PairingRequest
    timeslot: str

    @property
    def key(self) -> tuple[int, str]:
        return (self.request.id, self.timeslot)

    def __repr__(self):
        return f"Request[{self.request.id}]@{self.timeslot}"


@dataclass(frozen=True)
class Pairing:
    offer_request: PairingRequest
    seek_request: PairingRequest
    timeslot: str
    weight: float


def meets_hard_constraints(
    offer: PairingRequest, seek: PairingRequest, max_level_gap: Optional[int] = None
) -> bool:
    """Same subject, different participants, tutor level >= tutee level"""
    tutor: Participant = offer.owner
    tutee: Participant = seek.owner

    if offer.subject_id != seek.subject_id:
        logger.debug(f"Constraint failed: subjects differ ({offer.subject_id} vs {seek.subject_id})")
        return False

    if tutor.id == tutee.id:
        logger.debug(f"Constraint failed: participant {tutor.id} cannot pair with themselves")
        return False

    if tutor.level < tutee.level:
        logger.debug(
            f"Constraint failed: tutor level {tutor.level} < tutee level {tutee.level} "
            f"({tutor.id} vs {tutee.id})"
        )
        return False

    if max_level_gap is not None and tutor.level - tutee.level > max_level_gap:
        logger.debug(
            f"Constraint failed: level gap {tutor.level - tutee.level} exceeds {max_level_gap}"
        )
        return False

    return True


def calculate_weight(offer: PairingRequest, seek: PairingRequest) -> float:
    """Preference score of an eligible offer/seek pair"""
    tutor: Participant = offer.owner
    tutee: Participant = seek.owner

    weight = BASE_WEIGHT

    if tutor.track is not None and tutor.track == tutee.track and tutor.track != Track.NONE:
        weight += TRACK_BONUS

    # gaps beyond the table earn nothing but are not rejected
    weight += LEVEL_PROXIMITY_BONUS.get(tutor.level - tutee.level, 0.0)

    return weight


class MatchingEngine:
    """Builds, solves and persists one matching run"""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        max_level_gap: Optional[int] = MAX_LEVEL_GAP,
        solver: Optional[pulp.LpSolver] = None,
    ):
        self.db = db
        self.clock = clock or get_clock()
        self.max_level_gap = max_level_gap
        self.solver = solver or pulp.PULP_CBC_CMD(msg=False)
        self.repo = RequestRepository()

    # ------------------------------------------------------------------
    # Graph construction
    # ------------------------------------------------------------------

    def _fetch_pool(self, lock: bool = False) -> tuple[list[PairingRequest], list[PairingRequest]]:
        offers = self.repo.find_pending_by_intent(self.db, RequestIntent.OFFER, lock=lock)
        seeks = self.repo.find_pending_by_intent(self.db, RequestIntent.SEEK, lock=lock)

        # admin accounts never take part in tutoring
        offers = [r for r in offers if r.owner.role != ParticipantRole.ADMIN]
        seeks = [r for r in seeks if r.owner.role != ParticipantRole.ADMIN]
        return offers, seeks

    @staticmethod
    def _expand(requests: list[PairingRequest]) -> list[CandidateVertex]:
        vertices = []
        for request in requests:
            for timeslot in sorted(set(request.timeslots or [])):
                vertices.append(CandidateVertex(request, timeslot))
        return vertices

    def build_graph(
        self, offers: list[PairingRequest], seeks: list[PairingRequest]
    ) -> dict[tuple[CandidateVertex, CandidateVertex], float]:
        """Weighted edges keyed (offer vertex, seek vertex)"""
        offer_vertices = self._expand(offers)
        seek_vertices = self._expand(seeks)

        seeks_by_slot: dict[str, list[CandidateVertex]] = defaultdict(list)
        for vertex in seek_vertices:
            seeks_by_slot[vertex.timeslot].append(vertex)

        edges: dict[tuple[CandidateVertex, CandidateVertex], float] = {}
        for offer_vertex in offer_vertices:
            for seek_vertex in seeks_by_slot.get(offer_vertex.timeslot, []):
                if not meets_hard_constraints(
                    offer_vertex.request, seek_vertex.request, self.max_level_gap
                ):
                    continue
                weight = calculate_weight(offer_vertex.request, seek_vertex.request)
                if weight > 0:
                    edges[(offer_vertex, seek_vertex)] = weight

        logger.info(
            f"📊 Built bipartite graph: {len(offer_vertices)} offer vertices, "
            f"{len(seek_vertices)} seek vertices, {len(edges)} valid edges"
        )
        return edges

    # ------------------------------------------------------------------
    # Optimisation
    # ------------------------------------------------------------------

    def solve(
        self, edges: dict[tuple[CandidateVertex, CandidateVertex], float]
    ) -> list[tuple[CandidateVertex, CandidateVertex]]:
        """
        Maximum-weight matching as a 0/1 program.

        Variables:
            x[e] = 1 if edge e is selected.

        Rules encoded:
            each offer request is used by at most one selected edge
            each seek request is used by at most one selected edge

        A request-level cap implies the per-vertex cap. The constraint matrix
        is the incidence matrix of a bipartite multigraph, so the optimum is
        integral and equals the maximum-weight matching.
        """
        if not edges:
            return []

        prob = pulp.LpProblem("TutorPairMatching", pulp.LpMaximize)

        x: dict[tuple[CandidateVertex, CandidateVertex], pulp.LpVariable] = {}
        for idx, edge in enumerate(edges):
            x[edge] = pulp.LpVariable(f"x_{idx}", lowBound=0, upBound=1, cat="Binary")

        prob += pulp.lpSum(edges[e] * x[e] for e in edges), "TotalWeight"

        by_offer: dict[int, list] = defaultdict(list)
        by_seek: dict[int, list] = defaultdict(list)
        for edge in edges:
            offer_vertex, seek_vertex = edge
            by_offer[offer_vertex.request.id].append(x[edge])
            by_seek[seek_vertex.request.id].append(x[edge])

        for request_id, variables in by_offer.items():
            prob += pulp.lpSum(variables) <= 1, f"OfferOnce_{request_id}"
        for request_id, variables in by_seek.items():
            prob += pulp.lpSum(variables) <= 1, f"SeekOnce_{request_id}"

        prob.solve(self.solver)
        status = pulp.LpStatus[prob.status]
        if status != "Optimal":
            logger.error(f"❌ Matching solver finished with status {status}")
            raise RuntimeError(f"Matching solver failed: {status}")

        selected = [e for e, var in x.items() if var.varValue is not None and var.varValue > 0.5]
        logger.info(f"✅ Solver selected {len(selected)} potential timeslot matches")
        return selected

    # ------------------------------------------------------------------
    # Conflict resolution
    # ------------------------------------------------------------------

    def build_conflict_map(self) -> set[tuple[int, str]]:
        """(participant id, timeslot) already committed by confirmed requests"""
        occupied = set()
        for request in self.repo.find_confirmed(self.db):
            if request.chosen_timeslot:
                occupied.add((request.owner_id, request.chosen_timeslot))
        return occupied

    @staticmethod
    def _sort_key(item: tuple[CandidateVertex, CandidateVertex, float]):
        offer_vertex, seek_vertex, weight = item
        return (-weight, offer_vertex.request.id, seek_vertex.request.id, offer_vertex.timeslot)

    def resolve_conflicts(
        self,
        selected: list[tuple[CandidateVertex, CandidateVertex]],
        edges: dict[tuple[CandidateVertex, CandidateVertex], float],
        occupied: set[tuple[int, str]],
    ) -> list[Pairing]:
        """Accept edges by weight, skipping any that reuse a request or double-book a participant"""
        ranked = sorted(
            ((a, b, edges[(a, b)]) for a, b in selected),
            key=self._sort_key,
        )

        used_requests: set[int] = set()
        occupied = set(occupied)
        pairings: list[Pairing] = []

        for first, second, weight in ranked:
            # solver edges carry no direction guarantee for callers, normalise it
            if first.request.intent == RequestIntent.OFFER:
                offer_vertex, seek_vertex = first, second
            else:
                offer_vertex, seek_vertex = second, first

            offer = offer_vertex.request
            seek = seek_vertex.request
            timeslot = offer_vertex.timeslot

            if offer.id in used_requests or seek.id in used_requests:
                continue

            if (offer.owner_id, timeslot) in occupied or (seek.owner_id, timeslot) in occupied:
                logger.debug(
                    f"Skipping offer {offer.id} / seek {seek.id} at {timeslot}: participant busy"
                )
                continue

            pairings.append(Pairing(offer, seek, timeslot, weight))
            used_requests.update((offer.id, seek.id))
            occupied.add((offer.owner_id, timeslot))
            occupied.add((seek.owner_id, timeslot))
            logger.debug(
                f"Selected pairing: offer {offer.id} (participant {offer.owner_id}) with "
                f"seek {seek.id} (participant {seek.owner_id}) at {timeslot} (weight {weight})"
            )

        return pairings

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run_matching(self, lock: bool = False) -> list[Pairing]:
        """Compute accepted pairings without touching stored state"""
        offers, seeks = self._fetch_pool(lock=lock)
        logger.info(f"🔍 Found {len(offers)} offer and {len(seeks)} seek requests for matching")

        if not offers or not seeks:
            return []

        edges = self.build_graph(offers, seeks)
        selected = self.solve(edges)
        pairings = self.resolve_conflicts(selected, edges, self.build_conflict_map())

        logger.info(f"📊 Final pairing count: {len(pairings)}")
        return pairings

    def perform_matching(self) -> int:
        """
        Run matching and confirm every accepted pairing in one transaction.

        Returns:
            int: number of requests moved from PENDING to CONFIRMED
        """
        try:
            pairings = self.run_matching(lock=True)
            week_start = monday_of_week(self.clock.today())
            transitioned = 0

            for pairing in pairings:
                offer = pairing.offer_request
                seek = pairing.seek_request

                for request, partner in ((offer, seek), (seek, offer)):
                    if request.status != RequestStatus.PENDING:
                        raise RuntimeError(
                            f"Request {request.id} left PENDING during matching ({request.status})"
                        )
                    request.status = RequestStatus.CONFIRMED
                    request.chosen_timeslot = pairing.timeslot
                    request.week_start_date = week_start
                    request.matched_partner_id = partner.owner_id
                    self.repo.save(self.db, request)
                    transitioned += 1

                logger.info(
                    f"✅ Paired tutor {offer.owner_id} with tutee {seek.owner_id} for subject "
                    f"{offer.subject_id} at {pairing.timeslot} (weight: {pairing.weight})"
                )

            self.db.commit()
            logger.info(f"📊 Matching run confirmed {transitioned} request(s)")
            return transitioned

        except Exception as e:
            logger.error(f"❌ Matching run failed, rolling back: {str(e)}")
            self.db.rollback()
            raise
