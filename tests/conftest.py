import pytest

from plagiarism_detector.syntax_tree import BinaryExpression, Identifier, If, NumberLiteral, Return

SUM_ORIGINAL = """
int calculate_sum(int x, int y) {
    int total = x + y;
    if (total > 10) {
        return total * 2;
    } else {
        return total;
    }
}
"""

SUM_RENAMED = """
int compute_sum(int a, int b) { // function name changed, params renamed
    int result = a + b;
    if (result > 10) {
        return result * 2;
    } else {
        return result;
    }
}
"""

SUM_REORDERED = """
int calculate_sum_reordered(int y_param, int x_param) {
    int total_val = y_param + x_param;
    if (10 < total_val) {
        return 2 * total_val;
    } else {
        return total_val;
    }
}
"""

LOOP_FOR = """
// accumulate with a for loop
int main() {
    int sum = 0;
    for (int i = 0; i < 10; ++i) {
        sum += i;
    }
    return 0;
}
"""

LOOP_WHILE = """
int main() {
    int sum = 0;
    int i = 0;
    while (i < 10) {
        sum += i;
        i++;
    }
    return 0;
}
"""

UNRELATED = """
#include <iostream>
void greet() { std::cout << "Hello, world" << std::endl; }
"""


@pytest.fixture
def sum_original():
    return SUM_ORIGINAL


@pytest.fixture
def sum_renamed():
    return SUM_RENAMED


@pytest.fixture
def sum_reordered():
    return SUM_REORDERED


@pytest.fixture
def loop_for():
    return LOOP_FOR


@pytest.fixture
def loop_while():
    return LOOP_WHILE


@pytest.fixture
def unrelated():
    return UNRELATED


def build_else_if_chain(branches):
    """`if (x == 1) return 1; else if ...` nested `branches` deep, built without the parser."""
    node = Return(NumberLiteral("0"))
    for _ in range(branches):
        condition = BinaryExpression(Identifier("x"), "==", NumberLiteral("1"))
        node = If(condition, Return(NumberLiteral("1")), node)
    return node


@pytest.fixture
def deep_else_if_chain():
    return build_else_if_chain(1000)


@pytest.fixture
def corpus_dir(tmp_path):
    """A small submission tree: two copies, one unrelated file and two bad ones."""
    root = tmp_path / "submissions"
    (root / "alice").mkdir(parents=True)
    (root / "bob").mkdir()
    (root / "carol").mkdir()
    (root / ".git").mkdir()

    (root / "alice" / "sum.c").write_text(SUM_ORIGINAL)
    (root / "bob" / "sum.cpp").write_text(SUM_RENAMED)
    (root / "carol" / "greet.cpp").write_text(UNRELATED)
    (root / "carol" / "broken.c").write_text("int f(int a { return a; }")
    (root / "carol" / "tiny.h").write_text("int x;")
    (root / "carol" / "notes.txt").write_text("not source")
    (root / ".git" / "hook.c").write_text(SUM_ORIGINAL)
    return root
