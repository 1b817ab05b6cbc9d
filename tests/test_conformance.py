from pathlib import Path

from rascript.interpreter.script import AchievementScriptInterpreter
from rascript.config import RAScriptConfig

DEMO = Path(__file__).resolve().parents[1] / "examples" / "demo.rascript"


def test_parse_and_compile():
    interpreter = AchievementScriptInterpreter(RAScriptConfig())
    assert interpreter.run_file(str(DEMO)), interpreter.error
    assert interpreter.game_title == "Demo Quest"
    assert interpreter.game_id == 1234
    assert len(interpreter.achievements) == 4
    assert len(interpreter.leaderboards) == 2

    stage1, stage2, survivor, hoarder = interpreter.achievements
    assert stage1.trigger == "d0xH000010=1_0xH000010=2"
    assert stage1.source_line == 13
    assert stage2.id == 1002
    assert survivor.trigger == "0xH000010=4.1._R:0xH000011<d0xH000011S0xH000040=1S0xH000040=2"
    assert hoarder.trigger == "A:0xH000050_A:0xH000051_0xH000052>=200"

    high_score, speedrun = interpreter.leaderboards
    assert high_score.serialize() == "STA:0xH000010=1::CAN:0xH000011=0::SUB:0xH000010=9::VAL:0xX000020"
    assert speedrun.value == "0x 000030$0x 000032*2"
