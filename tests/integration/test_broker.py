"""Integration tests for processing sources through the broker."""

import pytest

from phpscope.broker import ClassTypes
from phpscope.core.errors import BrokerError, ErrorCode, FileProcessingError, ParseError, ReflectionRuntimeError
from phpscope.reflection import InvalidClass, InvalidFunction, UnresolvedClass


class TestDeclarations:
    """Tests for discovering declarations."""

    def test_namespaced_declarations(self, broker, process) -> None:
        process(
            """<?php
namespace App\\Model;

const LIMIT = 10;

interface Named {}

abstract class Base implements Named {}

final class User extends Base {}

trait Loggable {}

function make() {}
"""
        )

        assert broker.has_class("App\\Model\\User")
        assert broker.has_class("\\App\\Model\\Base")
        assert broker.has_function("App\\Model\\make")
        assert broker.has_constant("App\\Model\\LIMIT")

        user = broker.get_class("App\\Model\\User")
        assert user.get_short_name() == "User"
        assert user.get_namespace_name() == "App\\Model"
        assert user.is_final()
        assert user.get_parent_class_name() == "App\\Model\\Base"
        assert user.get_interface_names() == ["App\\Model\\Named"]
        assert broker.get_class("App\\Model\\Named").is_interface()
        assert broker.get_class("App\\Model\\Loggable").is_trait()
        assert broker.get_class("App\\Model\\Base").is_abstract()

    def test_global_namespace(self, broker, process) -> None:
        process("<?php\nclass Foo {}\nfunction bar() {}\n")

        foo = broker.get_class("Foo")
        assert foo.get_name() == "Foo"
        assert foo.get_namespace_name() == ""
        assert not foo.in_namespace()
        assert broker.get_function("bar").get_short_name() == "bar"
        assert broker.has_namespace("no-namespace")

    def test_multiple_namespace_blocks(self, broker, process) -> None:
        file = process(
            """<?php
namespace First {
    class A {}
}

namespace Second {
    class A extends \\First\\A {}
}
"""
        )

        assert [block.get_name() for block in file.get_namespaces()] == ["First", "Second"]
        assert broker.get_class("Second\\A").get_parent_class_name() == "First\\A"

    def test_use_aliases(self, broker, process) -> None:
        process(
            """<?php
namespace App;

use Vendor\\Lib\\Base;
use Vendor\\Contracts\\{Countable as Cnt, Jsonable};

class Thing extends Base implements Cnt, Jsonable {}
"""
        )

        thing = broker.get_class("App\\Thing")
        assert thing.get_parent_class_name() == "Vendor\\Lib\\Base"
        assert thing.get_own_interface_names() == ["Vendor\\Contracts\\Countable", "Vendor\\Contracts\\Jsonable"]

    def test_class_constant_references_are_not_classes(self, broker, process) -> None:
        process(
            """<?php
class Factory
{
    public function build()
    {
        $name = Factory::class;
        return new class {
            public function inner() {}
        };
    }
}
"""
        )

        assert [reflection.get_name() for reflection in broker.get_classes()] == ["Factory"]
        assert [method.get_name() for method in broker.get_class("Factory").get_own_methods()] == ["build"]

    def test_closures_are_not_functions(self, broker, process) -> None:
        process("<?php\n$f = function ($a) { return $a; };\nfunction real() {}\n")

        assert list(broker.get_functions()) == ["real"]

    def test_lines_and_source(self, broker, process) -> None:
        process("<?php\n\nclass Foo\n{\n    public $a;\n}\n", "lines.php")

        foo = broker.get_class("Foo")
        assert foo.get_file_name() == "lines.php"
        assert foo.get_start_line() == 3
        assert foo.get_end_line() == 6
        assert foo.get_source().startswith("class Foo")
        assert foo.get_source().endswith("}")


class TestMembers:
    """Tests for class members."""

    SOURCE = """<?php
namespace Shop;

class Cart
{
    const CURRENCY = 'EUR';
    const LIMIT = self::BASE * 2, BASE = 50;

    public static $instances = 0;
    protected $items = [];
    private ?int $owner = null;

    public function __construct(array $items = [], ?Customer $customer = null)
    {
    }

    public function add(Item $item, int &$count, ...$rest): static
    {
        static $calls = 0;
        return $this;
    }

    abstract protected function total();
}
"""

    def test_constants(self, broker, process) -> None:
        process(self.SOURCE)
        cart = broker.get_class("Shop\\Cart")

        assert cart.get_constant("CURRENCY") == "EUR"
        assert cart.get_constant("LIMIT") == 100
        assert cart.get_constants() == {"CURRENCY": "EUR", "LIMIT": 100, "BASE": 50}
        assert broker.get_constant("Shop\\Cart::BASE").get_value() == 50

    def test_properties(self, broker, process) -> None:
        process(self.SOURCE)
        cart = broker.get_class("Shop\\Cart")

        assert [prop.get_name() for prop in cart.get_properties()] == ["instances", "items", "owner"]
        assert cart.get_property("instances").is_static()
        assert cart.get_property("items").is_protected()
        assert cart.get_property("items").get_default_value() == []
        assert cart.get_property("owner").is_private()
        assert cart.get_static_properties() == {"instances": 0}

    def test_static_property_value_default(self, broker, process) -> None:
        process(self.SOURCE)
        cart = broker.get_class("Shop\\Cart")

        assert cart.get_static_property_value("instances") == 0
        assert cart.get_static_property_value("instances", 5) == 0
        assert cart.get_static_property_value("missing", None) is None
        assert cart.get_static_property_value("items", "fallback") == "fallback"
        with pytest.raises(ReflectionRuntimeError) as exc_info:
            cart.get_static_property_value("missing")
        assert exc_info.value.code == ErrorCode.DOES_NOT_EXIST

        customer = broker.get_class("Shop\\Customer")
        assert isinstance(customer, UnresolvedClass)
        assert customer.get_static_property_value("count", 0) == 0
        with pytest.raises(ReflectionRuntimeError):
            customer.get_static_property_value("count")

    def test_methods_and_parameters(self, broker, process) -> None:
        process(self.SOURCE)
        cart = broker.get_class("Shop\\Cart")

        constructor = cart.get_constructor()
        assert constructor is not None and constructor.get_name() == "__construct"
        items, customer = constructor.get_parameters()
        assert items.is_array()
        assert items.is_optional()
        assert items.get_default_value() == []
        assert customer.get_class_name() == "Shop\\Customer"
        assert customer.allows_null()

        add = cart.get_method("add")
        item, count, rest = add.get_parameters()
        assert not item.allows_null()
        assert not item.is_optional()
        assert count.is_passed_by_reference()
        assert rest.is_variadic()
        assert add.get_number_of_required_parameters() == 2
        assert add.get_static_variables() == {"calls": 0}
        assert cart.get_method("total").is_abstract()
        assert cart.get_method("total").is_protected()

    def test_missing_member(self, broker, process) -> None:
        process(self.SOURCE)
        with pytest.raises(ReflectionRuntimeError) as exc_info:
            broker.get_class("Shop\\Cart").get_method("remove")
        assert exc_info.value.code == ErrorCode.DOES_NOT_EXIST


class TestInheritance:
    """Tests for composed members across classes."""

    def test_inherited_and_overridden_methods(self, broker, process) -> None:
        process(
            """<?php
interface Shape { public function area(); }
abstract class Base implements Shape
{
    public function name() { return 'base'; }
    protected function scale() {}
}
class Square extends Base
{
    public function area() { return 4; }
    public function scale() {}
}
"""
        )
        square = broker.get_class("Square")

        names = {method.get_name(): method.get_declaring_class_name() for method in square.get_methods()}
        assert names == {"area": "Square", "scale": "Square", "name": "Base"}
        assert square.is_subclass_of("Base")
        assert square.implements_interface("Shape")
        assert square.get_parent_class_name_list() == ["Base"]
        assert square.get_method("area").get_prototype().get_declaring_class_name() == "Shape"
        assert square.get_method("scale").get_prototype().get_declaring_class_name() == "Base"
        assert broker.get_class("Base").get_direct_subclass_names() == ["Square"]

    def test_prototype_missing(self, broker, process) -> None:
        process("<?php\nclass Lonely { public function alone() {} }\n")
        with pytest.raises(ReflectionRuntimeError) as exc_info:
            broker.get_class("Lonely").get_method("alone").get_prototype()
        assert exc_info.value.code == ErrorCode.DOES_NOT_EXIST

    def test_inherited_doc_comment(self, broker, process) -> None:
        process(
            """<?php
class Base
{
    /**
     * Base text.
     *
     * @return int
     */
    public function value() {}
}
class Child extends Base
{
    /**
     * {@inheritdoc}
     */
    public function value() {}
}
"""
        )
        method = broker.get_class("Child").get_method("value")

        assert method.get_short_description() == "Base text."
        assert method.get_annotation("return") == ["int"]

    def test_forward_reference_completes_later(self, broker, process) -> None:
        process("<?php\nclass Child extends Later {}\n", "child.php")
        child = broker.get_class("Child")
        assert not child.is_complete()
        assert isinstance(child.get_parent_class(), UnresolvedClass)

        process("<?php\nclass Later { public function hello() {} }\n", "later.php")
        assert child.is_complete()
        assert child.has_method("hello")

    def test_internal_parent_is_never_complete(self, broker, process) -> None:
        process("<?php\nclass MyException extends \\Exception {}\n")
        reflection = broker.get_class("MyException")

        assert not reflection.is_complete()
        assert reflection.is_exception()
        assert [unresolved.get_name() for unresolved in broker.get_classes(ClassTypes.UNRESOLVED)] == ["Exception"]


class TestDocInheritance:
    """Tests for annotations inherited from ancestors."""

    SOURCE = """<?php
class Base
{
    /**
     * Base short.
     *
     * Base text.
     */
    public function run() {}

    /**
     * Adds values.
     *
     * @param int $a First.
     * @param int $b Second.
     * @return int
     * @throws RangeException
     */
    public function add($a, $b) {}

    /**
     * @param int $a First.
     * @param int $b Second.
     * @return int
     * @throws RangeException
     */
    public function sub($a, $b) {}

    /** @var int[] */
    public $values = [];
}
class Child extends Base
{
    /**
     * Child short.
     *
     * {@inheritdoc}
     */
    public function run() {}

    public function add($a, $b) {}

    /**
     * Subtracts values.
     *
     * @param int $a Own first.
     */
    public function sub($a, $b) {}

    /** Overridden values. */
    public $values = [];
}
"""

    def test_inheritdoc_in_long_description(self, broker, process) -> None:
        process(self.SOURCE)
        run = broker.get_class("Child").get_method("run")

        assert run.get_short_description() == "Child short."
        assert run.get_long_description() == "Base text."

    def test_missing_docblock_copies_whole_set(self, broker, process) -> None:
        process(self.SOURCE)
        add = broker.get_class("Child").get_method("add")

        assert add.get_doc_comment() is None
        assert add.get_annotations() == broker.get_class("Base").get_method("add").get_annotations()
        assert add.get_short_description() == "Adds values."

    def test_params_padded_and_throws_inherited(self, broker, process) -> None:
        process(self.SOURCE)
        sub = broker.get_class("Child").get_method("sub")

        assert sub.get_short_description() == "Subtracts values."
        assert sub.get_annotation("param") == ["int $a Own first.", "int $b Second."]
        assert sub.get_annotation("return") == ["int"]
        assert sub.get_annotation("throws") == ["RangeException"]

    def test_property_inherits_var(self, broker, process) -> None:
        process(self.SOURCE)
        values = broker.get_class("Child").get_property("values")

        assert values.get_short_description() == "Overridden values."
        assert values.get_annotation("var") == ["int[]"]


class TestDocTemplates:
    """Tests for ``/**#@+`` docblock templates."""

    def test_templates_stack_in_namespace_and_class(self, broker, process) -> None:
        process(
            """<?php
namespace Lib;

class Holder
{
    /**#@+
     * @var int
     */

    /** First. */
    public $a;

    /**#@+
     * @access protected
     */

    /** Second. */
    public $b;

    /**#@-*/

    /** Third. */
    public $c;

    /**#@-*/

    /** Fourth. */
    public $d;
}

/**#@+
 * @package lib
 */

/** Alpha. */
const ALPHA = 1;

/** Helper. */
function helper() {}

/**#@-*/

/** Beta. */
const BETA = 2;
"""
        )
        holder = broker.get_class("Lib\\Holder")

        first = holder.get_property("a")
        assert first.get_short_description() == "First."
        assert first.get_annotation("var") == ["int"]
        assert first.get_annotation("access") is None
        second = holder.get_property("b")
        assert second.get_annotation("var") == ["int"]
        assert second.get_annotation("access") == ["protected"]
        third = holder.get_property("c")
        assert third.get_annotation("var") == ["int"]
        assert third.get_annotation("access") is None
        fourth = holder.get_property("d")
        assert fourth.get_annotation("var") is None
        assert fourth.get_short_description() == "Fourth."

        alpha = broker.get_constant("Lib\\ALPHA")
        assert alpha.get_short_description() == "Alpha."
        assert alpha.get_annotation("package") == ["lib"]
        assert broker.get_function("Lib\\helper").get_annotation("package") == ["lib"]
        assert broker.get_constant("Lib\\BETA").get_annotation("package") is None

    def test_template_entries_precede_own(self, broker, process) -> None:
        process(
            """<?php
class Tagged
{
    /**#@+
     * @tag template
     */

    /** @tag own */
    public $a;

    /**#@-*/
}
"""
        )
        assert broker.get_class("Tagged").get_property("a").get_annotation("tag") == ["template", "own"]


class TestCopyDoc:
    """Tests for ``@copydoc`` references."""

    SOURCE = """<?php
namespace Lib;

/**
 * Source class.
 *
 * @author team
 */
class Src
{
    /**
     * Limit short.
     */
    const LIMIT = 10;

    /**
     * @var string[]
     */
    public $names = [];

    /**
     * Source short.
     *
     * @param int $value
     * @return int
     */
    public function a($value) {}
}

/**
 * @copydoc Src
 */
class Dst
{
    /** @copydoc Src::LIMIT */
    const MAX = 10;

    /** @copydoc Src::$names */
    public $labels = [];

    /**
     * Own short.
     *
     * @copydoc Src::a()
     * @return string
     */
    public function b($value) {}

    /** @copydoc b() */
    public function c($value) {}
}

/**
 * Source function.
 *
 * @return void
 */
function source() {}

/** @copydoc source() */
function copied() {}
"""

    def test_method_copies_missing_tags(self, broker, process) -> None:
        process(self.SOURCE)
        b = broker.get_class("Lib\\Dst").get_method("b")

        assert b.get_short_description() == "Own short."
        assert b.get_annotation("param") == ["int $value"]
        assert b.get_annotation("return") == ["string"]
        assert not b.has_annotation("copydoc")

    def test_method_in_same_class(self, broker, process) -> None:
        process(self.SOURCE)
        c = broker.get_class("Lib\\Dst").get_method("c")

        assert c.get_short_description() == "Own short."
        assert c.get_annotation("return") == ["string"]

    def test_class_function_property_and_constant(self, broker, process) -> None:
        process(self.SOURCE)
        dst = broker.get_class("Lib\\Dst")

        assert dst.get_short_description() == "Source class."
        assert dst.get_annotation("author") == ["team"]
        assert dst.get_property("labels").get_annotation("var") == ["string[]"]
        assert dst.get_constant_reflection("MAX").get_short_description() == "Limit short."
        copied = broker.get_function("Lib\\copied")
        assert copied.get_short_description() == "Source function."
        assert copied.get_annotation("return") == ["void"]

    def test_source_processed_later(self, broker, process) -> None:
        process("<?php\nclass Early { /** @copydoc Later::a() */ public function b() {} }\n", "early.php")
        b = broker.get_class("Early").get_method("b")
        assert b.get_short_description() is None

        process("<?php\nclass Later { /** Later short. */ public function a() {} }\n", "later.php")
        assert b.get_short_description() == "Later short."

    def test_mutual_references_terminate(self, broker, process) -> None:
        process(
            """<?php
class Loop
{
    /**
     * @copydoc Loop::b()
     * @return int
     */
    public function a() {}

    /**
     * Loop short.
     *
     * @copydoc a()
     */
    public function b() {}
}
"""
        )
        loop = broker.get_class("Loop")

        assert loop.get_method("a").get_short_description() == "Loop short."
        assert loop.get_method("b").get_annotation("return") == ["int"]
        assert not loop.get_method("a").has_annotation("copydoc")


class TestTraits:
    """Tests for trait composition."""

    def test_trait_methods_and_properties(self, broker, process) -> None:
        process(
            """<?php
trait T
{
    public $counter = 0;
    public function hello() { return 'T'; }
}
class C
{
    use T;
}
"""
        )
        c = broker.get_class("C")

        hello = c.get_method("hello")
        assert hello.get_declaring_trait_name() == "T"
        assert hello.get_declaring_class_name() == "C"
        assert c.has_trait_method("hello")
        assert c.get_property("counter").get_declaring_trait_name() == "T"
        assert c.get_trait_names() == ["T"]
        assert c.uses_trait("T")

    def test_insteadof_and_alias(self, broker, process) -> None:
        process(
            """<?php
trait A { public function hello() { return 'A'; } }
trait B { public function hello() { return 'B'; } }
class C
{
    use A, B {
        A::hello insteadof B;
        B::hello as protected helloB;
    }
}
"""
        )
        c = broker.get_class("C")

        assert c.get_method("hello").get_declaring_trait_name() == "A"
        alias = c.get_method("helloB")
        assert alias.get_declaring_trait_name() == "B"
        assert alias.get_original_name() == "hello"
        assert alias.is_protected()
        assert c.get_trait_aliases() == {"helloB": "B::hello"}

    def test_conflict_raises_on_composition(self, broker, process) -> None:
        process(
            """<?php
trait A { public function hello() {} }
trait B { public function hello() {} }
class C { use A, B; }
"""
        )
        with pytest.raises(ParseError) as exc_info:
            broker.get_class("C").get_methods()
        assert exc_info.value.code == ErrorCode.ALREADY_EXISTS

    def test_own_method_wins_over_trait(self, broker, process) -> None:
        process(
            """<?php
trait T { public function hello() {} }
class C { use T; public function hello() {} }
"""
        )
        hello = broker.get_class("C").get_method("hello")
        assert hello.get_declaring_trait_name() is None

    def test_trait_method_wins_over_parent(self, broker, process) -> None:
        process(
            """<?php
trait T { public function hello() { return 'T'; } }
class P { public function hello() { return 'P'; } }
class C extends P { use T; }
"""
        )
        hello = broker.get_class("C").get_method("hello")

        assert hello.get_declaring_trait() is broker.get_class("T")
        assert hello.get_declaring_class_name() == "C"

    @pytest.mark.parametrize("uses", ["A, B", "B, A"])
    def test_abstract_trait_method_yields_to_concrete(self, broker, process, uses) -> None:
        process(
            f"""<?php
trait A {{ abstract public function hello(); }}
trait B {{ public function hello() {{ return 'B'; }} }}
class C {{ use {uses}; }}
"""
        )
        hello = broker.get_class("C").get_method("hello")

        assert hello.get_declaring_trait_name() == "B"
        assert not hello.is_abstract()


class TestConflicts:
    """Tests for duplicate definitions."""

    def test_duplicate_function_across_files(self, broker, process) -> None:
        process("<?php\nfunction helper() {}\n", "first.php")
        process("<?php\nfunction helper() {}\n", "second.php")

        helper = broker.get_function("helper")
        assert isinstance(helper, InvalidFunction)
        assert helper.get_file_name() == "first.php"
        assert len(helper.get_reasons()) == 1
        assert helper.get_reasons()[0].code == ErrorCode.ALREADY_EXISTS

    def test_duplicate_class_in_one_file(self, broker, process) -> None:
        process("<?php\nclass Twice {}\nclass Twice {}\nclass Twice {}\n", "twice.php")

        twice = broker.get_class("Twice")
        assert isinstance(twice, InvalidClass)
        assert not twice.is_valid()
        assert len(twice.get_reasons()) == 2
        assert broker.get_classes() == []
        assert broker.get_classes(ClassTypes.INVALID) == [twice]

    def test_subclass_of_conflict_is_invalid(self, broker, process) -> None:
        process("<?php\nclass Dup {}\n", "a.php")
        process("<?php\nclass Dup {}\nclass Child extends Dup {}\n", "b.php")

        assert not broker.get_class("Child").is_valid()

    def test_frozen_members_kept_after_parent_conflict(self, broker, process) -> None:
        process("<?php\nclass Base { public function hello() {} }\nclass Child extends Base {}\n", "a.php")
        child = broker.get_class("Child")
        assert child.is_complete()
        assert child.is_valid()
        hello = child.get_method("hello")

        process("<?php\nclass Base {}\n", "b.php")

        assert isinstance(broker.get_class("Base"), InvalidClass)
        assert not child.is_valid()
        assert child.get_method("hello") is hello
        assert hello.get_declaring_class_name() == "Base"


class TestValues:
    """Tests for constant and default value resolution."""

    def test_namespace_constants_reference_each_other(self, broker, process) -> None:
        process(
            """<?php
namespace Conf;

const BASE = 'app';
const NAME = BASE . '-' . \\Conf\\BASE;
const FLAGS = [1, 2, BASE => true];
"""
        )

        assert broker.get_constant("Conf\\NAME").get_value() == "app-app"
        assert broker.get_constant("Conf\\FLAGS").get_value() == {0: 1, 1: 2, "app": True}

    def test_unresolved_reference(self, broker, process) -> None:
        process("<?php\nconst BROKEN = MISSING + 1;\n")
        assert broker.get_constant("BROKEN").get_value() == 1

    def test_forward_constant_resolved_later(self, broker, process) -> None:
        process("<?php\nconst LATE_SUM = EARLY + 1;\n", "sum.php")
        constant = broker.get_constant("LATE_SUM")
        assert constant.get_value() == 1

        process("<?php\nconst EARLY = 41;\n", "early.php")
        assert constant.get_value() == 42

    def test_magic_constants(self, broker, process) -> None:
        process(
            """<?php
namespace Magic;

class Box
{
    const WHO = __CLASS__;
    const WHERE = __NAMESPACE__;
    public function open($method = __METHOD__) {}
}
""",
            "magic.php",
        )
        box = broker.get_class("Magic\\Box")

        assert box.get_constant("WHO") == "Magic\\Box"
        assert box.get_constant("WHERE") == "Magic"
        assert box.get_method("open").get_parameter("method").get_default_value() == "Magic\\Box::open"


class TestFiles:
    """Tests for files, namespaces and directory processing."""

    def test_file_doc_comment(self, broker, process) -> None:
        file = process("<?php\n/**\n * File header.\n */\n\n/**\n * Class doc.\n */\nclass Doc {}\n")

        assert file.get_short_description() == "File header."
        assert broker.get_class("Doc").get_short_description() == "Class doc."

    def test_file_doc_comment_belongs_to_class(self, broker, process) -> None:
        file = process("<?php\n/**\n * Class doc.\n */\nclass OnlyDoc {}\n")

        assert file.get_doc_comment() is None
        assert broker.get_class("OnlyDoc").get_short_description() == "Class doc."

    def test_namespace_aggregate(self, broker, process) -> None:
        process("<?php\nnamespace Agg;\nclass A {}\nfunction f() {}\nconst C = 1;\n", "one.php")
        process("<?php\nnamespace Agg;\nclass B {}\n", "two.php")

        namespace = broker.get_namespace("Agg")
        assert namespace.get_class_names() == ["Agg\\A", "Agg\\B"]
        assert namespace.get_class_short_names() == ["A", "B"]
        assert namespace.has_function("f")
        assert namespace.get_constant("C").get_value() == 1
        with pytest.raises(ReflectionRuntimeError):
            namespace.get_class("Missing")
        with pytest.raises(BrokerError):
            broker.get_namespace("Nope")

    def test_processing_is_idempotent(self, broker, process) -> None:
        first = process("<?php\nclass Once {}\n", "once.php")
        second = process("<?php\nclass Once {}\n", "once.php")

        assert first is second
        assert not isinstance(broker.get_class("Once"), InvalidClass)

    def test_unparsable_file_registers_nothing(self, broker, process) -> None:
        with pytest.raises(FileProcessingError) as exc_info:
            process("<?php\nnamespace Broken\nclass Lost {}\n", "broken.php")

        assert exc_info.value.file_name == "broken.php"
        assert exc_info.value.get_reasons()
        assert not broker.has_class("Broken\\Lost")
        assert not broker.has_file("broken.php")

    def test_token_streams_kept(self, broker, process) -> None:
        process("<?php\nclass Kept {}\n", "kept.php")
        assert str(broker.get_file_tokens("kept.php")) == "<?php\nclass Kept {}\n"

    def test_process_directory(self, broker, sample_project) -> None:
        report = broker.process_directory(sample_project)

        assert report.success
        assert len(report.processed) == 3
        assert broker.has_class("App\\Model\\User")
        assert not broker.has_class("Ignored")
        assert broker.get_function("App\\helper").get_parameter("value").get_default_value() == "1.0"

    def test_process_directory_with_failures(self, broker, sample_project) -> None:
        broken = sample_project / "Broken.php"
        broken.write_text("<?php\nnamespace Broken\nclass Lost {}\n", encoding="utf-8")

        report = broker.process_directory(sample_project)

        assert not report.success
        assert list(report.failures) == [str(broken.resolve())]
        assert len(report.processed) == 3
        assert broker.has_class("App\\Model\\User")
        with pytest.raises(BrokerError):
            report.raise_for_failures()

    def test_process_missing_paths(self, broker, tmp_path) -> None:
        with pytest.raises(BrokerError) as exc_info:
            broker.process_file(tmp_path / "missing.php")
        assert exc_info.value.code == ErrorCode.DOES_NOT_EXIST
        with pytest.raises(BrokerError):
            broker.process_directory(tmp_path / "missing")
