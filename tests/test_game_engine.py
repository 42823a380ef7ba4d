import pytest

from holdem.game import GameEngine
from holdem.models import Player, PlayerSummary, PlayType, Street, TableConfig
from strategies.bots import CheckOrFoldBot

from .helpers import StackedDeck, ScriptedStrategy, create_engine, finish_passively, make_players, total_chips

# Heads-up deal order from the small blind: p0, p1, p0, p1, then burn/flop/burn/turn/burn/river.
ACES_VS_SEVEN_DEUCE = ["As", "7c", "Ad", "2h", "3d", "Kc", "9s", "4h", "5d", "Jd", "6s", "8c"]


def test_first_hand_posts_blinds_from_seat_zero():
    engine = create_engine()
    removed, first_actor = engine.next_hand()
    assert removed == []
    assert (engine.small_blind_position, engine.big_blind_position) == (0, 1)
    assert first_actor == 2
    assert engine.dealer_index == 2
    assert engine.pot == 3
    assert engine.current_bet == 2
    assert engine.street == Street.PRE_FLOP
    assert engine.consume_pre_events() == [{"ev": "POST_BLINDS", "sb_seat": 0, "bb_seat": 1, "sb": 1, "bb": 2}]
    assert engine.consume_pre_events() == []
    assert all(len(player.hand) == 2 for player in engine.players)
    assert engine.deck.count() == 52 - 6
    assert engine.hand is not None and engine.hand.hand_id == "H-00001"


def test_act_request_reflects_table_snapshot():
    engine = create_engine()
    engine.next_hand()
    p0, p1, p2 = engine.players
    request = engine.build_act_request(p2)

    assert request.to_call == 2
    assert request.min_raise == 4
    assert request.pot_size == 3
    assert request.any_bet_this_street is True
    assert request.your_current_bet == 0
    assert request.your_hand_bet == 0
    assert request.your_stack == 100
    assert request.num_active_players == 3
    assert request.your_seat_index == 2
    assert request.dealer_index == 2
    assert (request.small_blind, request.big_blind) == (1, 2)
    assert request.hole_cards == p2.hand.cards
    assert request.community_cards == ()
    assert dict(request.other_active_players) == {
        p0.id: PlayerSummary(chips=99, bet_chips=1),
        p1.id: PlayerSummary(chips=98, bet_chips=2),
    }
    with pytest.raises(TypeError):
        request.other_active_players["intruder"] = PlayerSummary(0, 0)  # type: ignore[index]

    payload = request.to_payload()
    assert payload["to_call"] == 2
    assert payload["opponents"][p1.id] == {"chips": 98, "bet": 2}


def test_fold_moves_turn_and_keeps_chips_in_pot():
    engine = create_engine()
    engine.next_hand()
    p2 = engine.players[2]
    events = engine.apply_move(p2.id, PlayType.FOLD)
    assert events == [{"ev": "FOLD", "seat": 2, "player": p2.id}]
    assert engine.active_seats == [0, 1]
    assert engine.current_turn == 0
    assert engine.pot == 3


def test_raise_commits_street_total_and_sets_new_minimum():
    engine = create_engine()
    engine.next_hand()
    p2 = engine.players[2]
    events = engine.apply_move(p2.id, PlayType.RAISE, 6)
    assert events == [{"ev": "RAISE", "seat": 2, "player": p2.id, "amount": 6}]
    assert engine.pot == 9
    assert p2.chips == 94
    assert engine.current_bet == 6
    assert engine.min_raise_to == 10
    assert engine.to_call(engine.players[0].id) == 5
    assert engine.current_turn == 0


def test_reraise_reopens_action_and_call_closes_street():
    engine = create_engine()
    engine.next_hand()
    p0, p1, p2 = engine.players
    engine.apply_move(p2.id, PlayType.RAISE, 6)
    engine.apply_move(p0.id, PlayType.RAISE, 14)
    assert engine.min_raise_to == 22
    assert engine.current_turn == 1

    engine.apply_move(p1.id, PlayType.FOLD)
    assert engine.current_turn == 2
    events = engine.apply_move(p2.id, PlayType.CALL)

    assert events[0] == {"ev": "CALL", "seat": 2, "player": p2.id, "amount": 8}
    assert events[1]["ev"] == "FLOP"
    assert engine.street == Street.FLOP
    assert engine.pot == 30
    assert engine.current_bet == 0
    assert engine.min_raise_to == 2
    assert engine.current_turn == 0


def test_big_blind_gets_option_after_limps():
    engine = create_engine()
    engine.next_hand()
    p0, p1, p2 = engine.players
    engine.apply_move(p2.id, PlayType.CALL)
    engine.apply_move(p0.id, PlayType.CALL)
    assert engine.current_turn == 1
    assert engine.build_act_request(p1).to_call == 0

    events = engine.apply_move(p1.id, PlayType.CALL)
    assert events[0] == {"ev": "CHECK", "seat": 1, "player": p1.id}
    assert events[1]["ev"] == "FLOP"
    assert len(events[1]["cards"]) == 3
    assert len(engine.community) == 3
    assert engine.pot == 6
    # Burn plus three flop cards.
    assert engine.deck.count() == 52 - 6 - 4
    # Post-flop action starts at the small blind.
    assert engine.current_turn == 0


def test_big_blind_can_raise_its_option():
    engine = create_engine()
    engine.next_hand()
    p0, p1, p2 = engine.players
    engine.apply_move(p2.id, PlayType.CALL)
    engine.apply_move(p0.id, PlayType.CALL)
    engine.apply_move(p1.id, PlayType.RAISE, 8)
    assert engine.street == Street.PRE_FLOP
    assert engine.current_turn == 2
    assert engine.to_call(p2.id) == 6


def test_short_all_in_does_not_reopen_action():
    engine = create_engine((5, 100, 100))
    engine.next_hand()
    p0, p1, p2 = engine.players
    engine.apply_move(p2.id, PlayType.RAISE, 10)
    events = engine.apply_move(p0.id, PlayType.ALL_IN)
    assert events == [{"ev": "ALL_IN", "seat": 0, "player": p0.id, "amount": 4}]
    assert engine.min_raise_to == 18
    assert engine.current_turn == 1

    engine.apply_move(p1.id, PlayType.CALL)
    assert engine.street == Street.FLOP
    assert engine.pot == 25
    # The all-in small blind is skipped on later streets.
    assert engine.current_turn == 1

    finish_passively(engine)
    assert total_chips(engine) == 205
    assert p0.chips <= 15


def test_all_in_above_high_bet_reopens_action():
    engine = create_engine()
    engine.next_hand()
    p0, p1, p2 = engine.players
    engine.apply_move(p2.id, PlayType.CALL)
    engine.apply_move(p0.id, PlayType.CALL)

    events = engine.apply_move(p1.id, PlayType.ALL_IN)

    assert events == [{"ev": "ALL_IN", "seat": 1, "player": p1.id, "amount": 98}]
    assert engine.street == Street.PRE_FLOP
    assert engine.current_turn == 2
    assert engine.to_call(p2.id) == 98
    assert engine.to_call(p0.id) == 98
    assert engine.min_raise_to == 100 + 98

    engine.apply_move(p2.id, PlayType.FOLD)
    assert engine.current_turn == 0


def test_raise_beyond_stack_becomes_all_in():
    engine = create_engine((100, 100))
    engine.next_hand()
    p0 = engine.players[0]
    events = engine.apply_move(p0.id, PlayType.RAISE, 150)
    assert events[0] == {"ev": "ALL_IN", "seat": 0, "player": p0.id, "amount": 99}
    assert p0.chips == 0
    assert engine.min_raise_to == 100 + 98


def test_all_in_and_call_runs_board_out_to_showdown():
    engine = create_engine((100, 100), deck=StackedDeck(ACES_VS_SEVEN_DEUCE))
    engine.next_hand()
    p0, p1 = engine.players
    assert [card.label for card in p0.hand.cards] == ["As", "Ad"]
    assert engine.current_turn == 0

    engine.apply_move(p0.id, PlayType.ALL_IN)
    events = engine.apply_move(p1.id, PlayType.CALL)

    assert [event["ev"] for event in events] == [
        "ALL_IN",
        "FLOP",
        "TURN",
        "RIVER",
        "SHOWDOWN",
        "SHOWDOWN",
        "POT_AWARD",
        "ELIMINATED",
    ]
    assert engine.is_hand_complete()
    assert (p0.chips, p1.chips) == (200, 0)
    assert engine.pot == 0
    result = engine.last_result
    assert result is not None
    assert [card.label for card in result.board] == ["Kc", "9s", "4h", "Jd", "8c"]
    assert [value.describe() for _, value in result.showdown_hands] == ["pair", "high_card"]
    assert result.winners == (p0,)
    assert result.awards == {p0.id: 200}
    assert engine.is_match_over()


def test_short_big_blind_runs_out_during_next_hand():
    engine = create_engine((100, 3), sb=5, bb=10, deck=StackedDeck(ACES_VS_SEVEN_DEUCE))
    removed, first_actor = engine.next_hand()

    assert first_actor is None
    assert engine.is_hand_complete()
    events = engine.consume_pre_events()
    assert [event["ev"] for event in events][:4] == ["POST_BLINDS", "FLOP", "TURN", "RIVER"]
    assert events[0]["bb"] == 3
    assert [player.chips for player in engine.players] == [103, 0]
    with pytest.raises(RuntimeError, match="Not enough players"):
        engine.next_hand()


def test_blind_rotation_wraps_around():
    engine = create_engine()
    seen = []
    for _ in range(4):
        engine.next_hand()
        seen.append((engine.small_blind_position, engine.big_blind_position))
        finish_passively(engine)
        assert total_chips(engine) == 300
    assert seen == [(0, 1), (1, 2), (2, 0), (0, 1)]


def test_busted_players_are_removed_before_blinds():
    engine = create_engine()
    p0, p1, p2 = engine.players
    p1.chips = 0
    removed, first_actor = engine.next_hand()
    assert removed == [p1.id]
    assert engine.players == [p0, p2]
    assert p2.position == 1
    assert (engine.small_blind_position, engine.big_blind_position) == (0, 1)
    # Heads-up the small blind acts first before the flop.
    assert first_actor == 0


def test_chips_are_conserved_across_hands():
    engine = create_engine((100, 150, 50))
    for _ in range(10):
        if engine.is_match_over():
            break
        engine.next_hand()
        assert total_chips(engine) == 300
        finish_passively(engine)
        assert engine.pot == 0
        assert sum(engine.stacks().values()) == 300


def test_everyone_folds_to_the_big_blind():
    players = [Player(name=name, chips=100, strategy=CheckOrFoldBot()) for name in ("A", "B", "C")]
    engine = GameEngine(players, TableConfig(max_players=3, starting_stack=100, sb=1, bb=2, seed=11))

    result = engine.play_hand()

    assert [player.chips for player in players] == [99, 101, 100]
    assert result.winners == (players[1],)
    assert result.showdown_hands == ()
    assert result.board == ()
    assert result.awards == {players[1].id: 3}
    assert engine.pot == 0
    assert sum(player.chips for player in players) == 300


def test_play_hand_asks_each_strategy_in_turn():
    players = make_players((100, 100))
    players[0].strategy = ScriptedStrategy([(PlayType.RAISE, 10)])
    engine = GameEngine(players, TableConfig(max_players=2, sb=1, bb=2, seed=3))

    result = engine.play_hand()

    first_request = players[0].strategy.requests[0]
    assert first_request.to_call == 1
    assert first_request.min_raise == 4
    assert players[1].strategy.requests[0].to_call == 8
    assert len(result.board) == 5
    assert len(result.showdown_hands) == 2
    assert sum(player.chips for player in players) == 200


def test_deal_helpers_burn_before_each_street():
    engine = create_engine((100, 100), deck=StackedDeck(ACES_VS_SEVEN_DEUCE))
    engine.next_hand()
    assert [card.label for card in engine.deal_flop()] == ["Kc", "9s", "4h"]
    assert [card.label for card in engine.deal_turn()] == ["Jd"]
    assert [card.label for card in engine.deal_river()] == ["8c"]


def test_table_state_snapshot():
    engine = create_engine()
    engine.next_hand()
    state = engine.table_state()
    assert state["hand_id"] == "H-00001"
    assert state["street"] == "PRE_FLOP"
    assert state["pot"] == 3
    assert state["next_actor"] == 2
    assert [player["committed"] for player in state["players"]] == [1, 2, 0]
