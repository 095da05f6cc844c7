"""
Console Test Harness for AssessmentStateMachine

Simple console loop to walk an assessment without the web API.

Commands:
    <number>        toggle the Nth joint of the current region
    n / next        advance
    p / prev        retreat
    pga|ega|crp <v> set a clinical input
    score           compute SDAI
    finish          print final report and exit
    quit            exit without finishing
"""

import logging
import sys

from joint_assessment.commands import (
    Advance,
    ComputeScore,
    FinishAssessment,
    Retreat,
    SelectJoint,
    SetClinicalInput,
    StartAssessment,
)
from joint_assessment.core.assessment_machine import AssessmentStateMachine
from joint_assessment.core.region_catalog import RegionCatalog
from joint_assessment.results import FinalReport, IllegalCommand
from joint_assessment.utils.display_helpers import build_view

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"quit", "exit", "stop"}


def print_separator(char="=", length=60):
    """Print a separator line"""
    print(char * length)


def print_view(view):
    """Print the current screen"""
    print_separator("-")
    print(f"[Step {view['step']}/{view['step_count']}] {view['title']}")

    if 'joints' in view:
        region = view['region']
        print(f"Region {region['index'] + 1}/{region['count']}: {view['subtitle']}")
        for number, joint in enumerate(view['joints'], start=1):
            marker = "[x]" if joint['selected'] else "[ ]"
            print(f"  {number}. {marker} {joint['name']}")
        print(f"Selected this phase: {view['selected_count']}")

    elif 'clinical_inputs' in view:
        for item in view['clinical_inputs']:
            print(f"  {item['field']}: {item['value']:.0f} {item['unit']}  "
                  f"({item['label']}, {item['min']:.0f}-{item['max']:.0f})")

    elif 'results' in view:
        for line in view['results']:
            print(f"  {line['label']}: {line['value']}")

    actions = []
    if view['can_retreat']:
        actions.append("p=previous")
    actions.append({'next': 'n=next', 'calculate': 'score=calculate', 'finish': 'finish'}[view['primary_action']])
    print(f"Actions: {', '.join(actions)}")
    print_separator("-")


def parse_command(user_input, view):
    """
    Translate console input into a command.

    Returns:
        Command or None if the input was not understood
    """
    parts = user_input.split()
    keyword = parts[0].lower()

    if keyword in ("n", "next"):
        return Advance()
    if keyword in ("p", "prev", "previous"):
        return Retreat()
    if keyword == "score":
        return ComputeScore()
    if keyword == "finish":
        return FinishAssessment()

    if keyword in ("pga", "ega", "crp") and len(parts) == 2:
        try:
            return SetClinicalInput(field=keyword, value=float(parts[1]))
        except ValueError:
            return None

    if keyword.isdigit() and 'joints' in view:
        index = int(keyword) - 1
        if 0 <= index < len(view['joints']):
            return SelectJoint(joint=view['joints'][index]['name'])

    return None


def main(config_path=None):
    """Run console assessment"""
    print_separator()
    print("JOINT ASSESSMENT - CONSOLE")
    print_separator()

    try:
        catalog = RegionCatalog(config_path)
        machine = AssessmentStateMachine(catalog)
    except (FileNotFoundError, ValueError) as e:
        print(f"\nFailed to initialize: {e}")
        return 1

    # State is external - we hold it in this loop
    state = machine.handle(StartAssessment()).state

    while True:
        view = build_view(state, catalog)
        print_view(view)

        try:
            user_input = input("> ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nAssessment interrupted by user")
            break

        if not user_input:
            continue

        if user_input.lower() in EXIT_COMMANDS:
            print("Assessment ended without finishing")
            break

        command = parse_command(user_input, view)
        if command is None:
            print(f"Unrecognised input: {user_input}")
            continue

        result = machine.handle(command, state)

        if isinstance(result, IllegalCommand):
            print(f"Not allowed: {result.reason}")
            continue

        if isinstance(result, FinalReport):
            print_separator()
            print("ASSESSMENT COMPLETE")
            print_separator()
            for key, value in result.to_json().items():
                print(f"  {key}: {value}")
            logger.info(f"Console assessment finished (score {result.score})")
            break

        state = result.state

    print_separator()
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
