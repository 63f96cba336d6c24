import pytest

from plagiarism_detector.syntax_tree import (
    COMMUTATIVE_OPERATORS,
    HASH_MODULUS,
    BinaryExpression,
    Block,
    CanonicalHasher,
    CharLiteral,
    ExpressionStatement,
    For,
    Identifier,
    NodeKind,
    NumberLiteral,
    Return,
    StringLiteral,
    Type,
    UnaryExpression,
    VariableDeclaration,
    While,
    canonical_hash,
    combine_hashes,
    format_tree,
    hash_string,
    lower_for_loop,
)


def left_operand():
    return Identifier("a")


def right_operand():
    # Different hash from a bare identifier.
    return BinaryExpression(NumberLiteral("1"), "-", Identifier("b"))


def sample_for():
    return For(
        initializer=VariableDeclaration(Type("int"), Identifier("i"), NumberLiteral("0")),
        condition=BinaryExpression(Identifier("i"), "<", NumberLiteral("10")),
        increment=UnaryExpression("++", Identifier("i")),
        body=Block([ExpressionStatement(BinaryExpression(Identifier("s"), "+=", Identifier("i")))]),
    )


def test_hash_primitives():
    assert combine_hashes(1, 2) == 33
    assert hash_string("") == 0
    assert hash_string("ab") == 97 + 98 * 37
    assert combine_hashes(HASH_MODULUS - 1, 0) < HASH_MODULUS


def test_node_kind_tags_are_fixed():
    assert NodeKind.PROGRAM == 0
    assert NodeKind.FOR_STATEMENT == 5
    assert NodeKind.BLOCK_STATEMENT == 8
    assert NodeKind.TYPE == 17


def test_leaves_hash_to_their_tag():
    assert canonical_hash(Identifier("anything")) == NodeKind.IDENTIFIER
    assert canonical_hash(NumberLiteral("3.14")) == NodeKind.NUMBER_LITERAL
    assert canonical_hash(StringLiteral('"x"')) == NodeKind.STRING_LITERAL
    assert canonical_hash(CharLiteral("'c'")) == NodeKind.CHAR_LITERAL


def test_type_hash_uses_name():
    assert canonical_hash(Type("int")) == combine_hashes(NodeKind.TYPE, hash_string("int"))
    assert canonical_hash(Type("int")) != canonical_hash(Type("void"))


@pytest.mark.parametrize("operator", sorted(COMMUTATIVE_OPERATORS))
def test_commutative_operators_ignore_operand_order(operator):
    a, b = left_operand(), right_operand()
    assert canonical_hash(a) != canonical_hash(b)
    assert canonical_hash(BinaryExpression(a, operator, b)) == canonical_hash(BinaryExpression(b, operator, a))


@pytest.mark.parametrize("operator,mirrored", [("<", ">"), ("<=", ">="), (">", "<"), (">=", "<=")])
def test_relational_operators_flip(operator, mirrored):
    a, b = left_operand(), right_operand()
    assert canonical_hash(BinaryExpression(a, operator, b)) == canonical_hash(BinaryExpression(b, mirrored, a))


@pytest.mark.parametrize("operator", ["-", "/", "%", "=", "<<"])
def test_ordered_operators_keep_operand_order(operator):
    a, b = left_operand(), right_operand()
    assert canonical_hash(BinaryExpression(a, operator, b)) != canonical_hash(BinaryExpression(b, operator, a))


def test_operator_participates_in_hash():
    a, b = left_operand(), right_operand()
    assert canonical_hash(BinaryExpression(a, "+", b)) != canonical_hash(BinaryExpression(a, "*", b))


def test_renaming_and_literal_changes_do_not_change_hash():
    original = VariableDeclaration(
        Type("int"), Identifier("total"), BinaryExpression(Identifier("x"), "+", NumberLiteral("1"))
    )
    renamed = VariableDeclaration(
        Type("int"), Identifier("result"), BinaryExpression(Identifier("a"), "+", NumberLiteral("99"))
    )
    assert canonical_hash(original) == canonical_hash(renamed)


def test_prefix_and_postfix_hash_alike():
    assert canonical_hash(UnaryExpression("++", Identifier("i"))) == canonical_hash(
        UnaryExpression("++", Identifier("j"), postfix=True)
    )


def test_optional_children_are_skipped():
    assert canonical_hash(Return()) == NodeKind.RETURN_STATEMENT
    assert canonical_hash(Return(NumberLiteral("0"))) != canonical_hash(Return())


def test_hash_range():
    assert 0 <= canonical_hash(sample_for()) < HASH_MODULUS


def test_clone_is_deep_and_hashes_identically():
    block = Block([ExpressionStatement(Identifier("x"))])
    duplicate = block.clone()
    assert duplicate == block
    assert canonical_hash(duplicate) == canonical_hash(block)
    duplicate.statements.append(Return())
    assert len(block.statements) == 1


def test_lower_for_loop_builds_equivalent_while():
    loop = sample_for()
    before = format_tree(loop)
    init_stmt, while_loop = lower_for_loop(loop)

    assert isinstance(init_stmt, VariableDeclaration)
    assert isinstance(while_loop, While)
    statements = while_loop.body.statements
    assert len(statements) == 2
    assert isinstance(statements[-1], ExpressionStatement)
    assert isinstance(statements[-1].expression, UnaryExpression)
    # Built from copies; the loop itself is untouched.
    assert format_tree(loop) == before
    assert while_loop.condition is not loop.condition


def test_lower_for_loop_wraps_expression_initializer():
    loop = For(BinaryExpression(Identifier("i"), "=", NumberLiteral("0")), None, None, ExpressionStatement(Identifier("s")))
    init_stmt, while_loop = lower_for_loop(loop)
    assert isinstance(init_stmt, ExpressionStatement)
    assert while_loop.condition is None
    assert len(while_loop.body.statements) == 1


def test_for_hashes_as_its_lowering():
    loop = sample_for()
    init_stmt, while_loop = lower_for_loop(loop)
    assert canonical_hash(loop) == canonical_hash(Block([init_stmt, while_loop]))

    loop.initializer = None
    _, while_loop = lower_for_loop(loop)
    assert canonical_hash(loop) == canonical_hash(while_loop)


def test_block_splices_for_lowering():
    loop = sample_for()
    init_stmt, while_loop = lower_for_loop(loop)
    with_for = Block([VariableDeclaration(Type("int"), Identifier("s"), NumberLiteral("0")), loop, Return()])
    with_while = Block([VariableDeclaration(Type("int"), Identifier("s"), NumberLiteral("0")), init_stmt, while_loop, Return()])
    assert canonical_hash(with_for) == canonical_hash(with_while)


def test_nested_for_loops_lower_consistently():
    outer = sample_for()
    outer.body = Block([sample_for()])
    init_stmt, while_loop = lower_for_loop(outer)
    assert canonical_hash(outer) == canonical_hash(Block([init_stmt, while_loop]))


def test_hasher_memoizes_per_node():
    hasher = CanonicalHasher()
    node = right_operand()
    assert hasher.hash(node) == hasher.hash(node) == canonical_hash(node)


def test_format_tree():
    text = format_tree(sample_for())
    lines = text.splitlines()
    assert lines[0] == "FOR_STATEMENT"
    assert "  initializer:" in lines
    assert any(line.strip() == "BINARY_EXPRESSION [<]" for line in lines)
    assert any(line.strip() == "UNARY_EXPRESSION [++]" for line in lines)
    assert format_tree(None) == "(none)\n"


def test_long_else_if_chain_hashes_iteratively(deep_else_if_chain):
    value = CanonicalHasher().hash(deep_else_if_chain)
    assert 0 <= value < HASH_MODULUS
    assert canonical_hash(deep_else_if_chain.clone()) == value


def test_deep_for_body_hashes_as_its_lowering(deep_else_if_chain):
    loop = For(None, Identifier("x"), UnaryExpression("++", Identifier("i")), Block([deep_else_if_chain]))
    _, while_loop = lower_for_loop(loop)
    assert canonical_hash(loop) == canonical_hash(while_loop)


def test_format_tree_handles_long_chains(deep_else_if_chain):
    lines = format_tree(deep_else_if_chain).splitlines()
    assert sum(1 for line in lines if line.strip() == "IF_STATEMENT") == 1000
    assert lines[-1].strip() == "NUMBER_LITERAL: 0"
