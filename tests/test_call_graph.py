"""
Tests for call-graph and dependency extraction across languages.
"""
import unittest

from codemodel.analysis.call_graph import CallGraphExtractor
from codemodel.analysis.symbol_resolver import SymbolResolver
from codemodel.config import ExtractionConfig
from codemodel.core import DependencyKind, InvalidTreeError
from codemodel.indexer import Indexer
from codemodel.languages import JavaAdapter
from codemodel.parsers import JavaParser, ParseResult

JAVA_SOURCE = """package com.example;

import java.util.ArrayList;
import java.util.List;

public class UserService extends BaseService implements Auditable, Serializable {
    private UserRepository repository;
    private List<User> cache = new ArrayList<>();

    public User register(String name, boolean notify) {
        validate(name);
        User user = new User(name);
        repository.save(user);
        repository.save(user);
        if (notify) {
            mailer.send(user);
            validate(name);
        }
        List<String> names = new ArrayList<>();
        System.out.println(name);
        return user;
    }

    private void validate(String name) {
        if (name == null) {
            throw new IllegalArgumentException("name");
        }
    }
}

class User {
    private String name;

    User(String name) {
        this.name = name;
    }
}

interface UserRepository extends Repository<User> {
    void save(User user);
}
"""

PYTHON_SOURCE = """from dataclasses import dataclass


@dataclass
class User(BaseModel):
    name: str
    address: Address


class Admin(User, Auditable):
    level: int = 0

    def promote(self, store: Store) -> User:
        self.check()
        store.save(self)
        if self.level > 3:
            notify(self)
        else:
            print("no")
        return self

    @staticmethod
    def check():
        return helper(1)


def helper(value: int) -> Optional[Report]:
    return build_report(value)
"""

RUST_SOURCE = """use std::collections::HashMap;

pub struct User {
    name: String,
    profile: Profile,
}

pub trait Greeter: Named {
    fn greet(&self) -> String;
}

impl Greeter for User {
    fn greet(&self) -> String {
        let n = String::from("x");
        let v: Vec<u8> = Vec::new();
        format!("hi {}", n)
    }
}

impl User {
    pub fn new(name: &str) -> Self {
        let profile = Profile::default();
        if name.is_empty() {
            log_empty();
        }
        User { name: name.to_string(), profile }
    }
}

fn make() -> User {
    let u = User::new("a");
    u
}
"""

GO_SOURCE = """package shop

import "fmt"

type Store interface {
	Reader
	Save(o *Order) error
}

type Order struct {
	Base
	ID    string
	Items []Item
}

func (o *Order) Total() int {
	total := 0
	for _, it := range o.Items {
		if it.Qty > 0 {
			total += price(it)
		}
	}
	fmt.Println(total)
	return total
}

func NewOrder(id string) *Order {
	o := &Order{ID: id}
	o.Total()
	return o
}

func price(it Item) int {
	return len(it.Name)
}
"""


class CallGraphTestCase(unittest.TestCase):
    """Indexes one source unit and offers dependency lookups."""

    source = ""
    file_path = ""
    language = ""
    config = None

    @classmethod
    def setUpClass(cls):
        cls.model = Indexer(cls.config).index_source(cls.source, cls.file_path, cls.language)

    def entity(self, qualified_name):
        found = [e for e in self.model.entities.values() if (e.qualified_name or e.name) == qualified_name]
        self.assertEqual(len(found), 1, f"expected one entity named {qualified_name}")
        return found[0]

    def deps(self, qualified_name, kind=None):
        return self.model.get_dependencies(from_id=self.entity(qualified_name).id, kind=kind)

    def targets(self, qualified_name, kind):
        return sorted(d.target for d in self.deps(qualified_name, kind))


class TestJavaCallGraph(CallGraphTestCase):
    source = JAVA_SOURCE
    file_path = "src/com/example/UserService.java"
    language = "java"

    def test_calls_are_deduplicated(self):
        calls = self.targets("UserService.register", DependencyKind.CALLS)
        self.assertEqual(calls, ["User", "mailer.send", "repository.save", "validate"])

    def test_conditional_detection(self):
        calls = {d.target: d for d in self.deps("UserService.register", DependencyKind.CALLS)}
        # Also called inside the if, but the earlier call is unconditional
        self.assertFalse(calls["validate"].optional)
        self.assertTrue(calls["mailer.send"].optional)
        self.assertFalse(calls["repository.save"].optional)

    def test_edge_located_at_first_occurrence(self):
        calls = {d.target: d for d in self.deps("UserService.register", DependencyKind.CALLS)}
        self.assertEqual(calls["repository.save"].location, f"{self.file_path}:13")
        self.assertEqual(calls["repository.save"].to_name, "save")
        self.assertEqual(calls["repository.save"].to_qualified, "repository.save")

    def test_resolution(self):
        calls = {d.target: d for d in self.deps("UserService.register", DependencyKind.CALLS)}
        self.assertEqual(calls["validate"].to_id, self.entity("UserService.validate").id)
        self.assertEqual(calls["repository.save"].to_id, self.entity("UserRepository.save").id)
        self.assertEqual(calls["User"].to_id, self.entity("com.example.User").id)
        self.assertIsNone(calls["mailer.send"].to_id)

    def test_builtin_construction_filtered(self):
        everything = [d.target for d in self.model.dependencies]
        self.assertNotIn("ArrayList", everything)
        self.assertNotIn("IllegalArgumentException", everything)
        self.assertNotIn("System.out.println", everything)
        self.assertNotIn("String", everything)

    def test_uses_type(self):
        self.assertEqual(self.targets("UserService.register", DependencyKind.USES_TYPE), ["User"])
        self.assertEqual(self.targets("UserRepository.save", DependencyKind.USES_TYPE), ["User"])

    def test_method_of(self):
        owners = self.deps("UserService.register", DependencyKind.METHOD_OF)
        self.assertEqual(len(owners), 1)
        self.assertEqual(owners[0].to_name, "UserService")
        self.assertEqual(owners[0].to_id, self.entity("com.example.UserService").id)
        self.assertEqual(self.targets("User.User", DependencyKind.METHOD_OF), ["User"])

    def test_class_bases(self):
        self.assertEqual(self.targets("com.example.UserService", DependencyKind.EXTENDS), ["BaseService"])
        self.assertEqual(self.targets("com.example.UserService", DependencyKind.IMPLEMENTS),
                         ["Auditable", "Serializable"])

    def test_interface_extends(self):
        self.assertEqual(self.targets("com.example.UserRepository", DependencyKind.EXTENDS), ["Repository"])
        self.assertEqual(self.targets("com.example.UserRepository", DependencyKind.IMPLEMENTS), [])

    def test_class_member_types(self):
        # Base clauses and methods are pruned; field types are kept
        self.assertEqual(self.targets("com.example.UserService", DependencyKind.USES_TYPE),
                         ["User", "UserRepository"])

    def test_imports_have_no_edges(self):
        imports = [e for e in self.model.entities.values() if e.kind.value == "import"]
        self.assertEqual(len(imports), 2)
        for entity in imports:
            self.assertEqual(self.model.get_dependencies(from_id=entity.id), [])


class TestPythonCallGraph(CallGraphTestCase):
    source = PYTHON_SOURCE
    file_path = "app/models.py"
    language = "python"

    def test_method_calls(self):
        calls = {d.target: d for d in self.deps("Admin.promote", DependencyKind.CALLS)}
        self.assertEqual(sorted(calls), ["notify", "self.check", "store.save"])
        self.assertTrue(calls["notify"].optional)
        self.assertFalse(calls["store.save"].optional)
        self.assertEqual(calls["self.check"].to_id, self.entity("Admin.check").id)

    def test_annotations(self):
        self.assertEqual(self.targets("Admin.promote", DependencyKind.USES_TYPE), ["Store", "User"])
        self.assertEqual(self.targets("helper", DependencyKind.USES_TYPE), ["Report"])

    def test_free_function_has_no_owner(self):
        self.assertEqual(self.deps("helper", DependencyKind.METHOD_OF), [])
        self.assertEqual(self.targets("helper", DependencyKind.CALLS), ["build_report"])
        self.assertEqual(self.targets("Admin.promote", DependencyKind.METHOD_OF), ["Admin"])

    def test_decorators(self):
        self.assertEqual(self.targets("User", DependencyKind.CALLS), ["dataclass"])
        # Builtin decorators are filtered like builtin calls
        self.assertEqual(self.targets("Admin.check", DependencyKind.CALLS), ["helper"])

    def test_class_bases_and_fields(self):
        self.assertEqual(self.targets("User", DependencyKind.EXTENDS), ["BaseModel"])
        self.assertEqual(self.targets("User", DependencyKind.USES_TYPE), ["Address"])
        # Every Python base is a superclass
        self.assertEqual(self.targets("Admin", DependencyKind.EXTENDS), ["Auditable", "User"])
        self.assertEqual(self.targets("Admin", DependencyKind.IMPLEMENTS), [])
        self.assertEqual(self.targets("Admin", DependencyKind.USES_TYPE), [])


class TestPythonBuiltinOverrides(CallGraphTestCase):
    source = PYTHON_SOURCE
    file_path = "app/models.py"
    language = "python"
    config = ExtractionConfig(extra_builtins={"python": ["notify"]}, removed_builtins={"python": ["print"]})

    def test_configured_builtins(self):
        self.assertEqual(self.targets("Admin.promote", DependencyKind.CALLS), ["print", "self.check", "store.save"])


class TestRustCallGraph(CallGraphTestCase):
    source = RUST_SOURCE
    file_path = "src/user.rs"
    language = "rust"

    def test_builtin_constructors_filtered(self):
        self.assertEqual(self.deps("User::greet", DependencyKind.CALLS), [])
        everything = [d.target for d in self.model.dependencies]
        self.assertNotIn("String", everything)
        self.assertNotIn("String::from", everything)
        self.assertNotIn("Vec::new", everything)
        self.assertNotIn("format", everything)

    def test_associated_constructor(self):
        calls = {d.target: d for d in self.deps("User::new", DependencyKind.CALLS)}
        self.assertIn("Profile::default", calls)
        self.assertIn("Profile", calls)
        self.assertIn("User", calls)
        self.assertTrue(calls["log_empty"].optional)
        self.assertFalse(calls["Profile::default"].optional)

    def test_free_function(self):
        calls = {d.target: d for d in self.deps("make", DependencyKind.CALLS)}
        self.assertEqual(calls["User::new"].to_id, self.entity("User::new").id)
        self.assertEqual(calls["User"].to_id, self.entity("User").id)
        self.assertEqual(self.deps("make", DependencyKind.METHOD_OF), [])
        self.assertEqual(self.targets("make", DependencyKind.USES_TYPE), ["User"])

    def test_method_of_impl_type(self):
        self.assertEqual(self.targets("User::greet", DependencyKind.METHOD_OF), ["User"])
        self.assertEqual(self.targets("User::new", DependencyKind.METHOD_OF), ["User"])
        self.assertEqual(self.targets("Greeter::greet", DependencyKind.METHOD_OF), ["Greeter"])

    def test_struct_implements_trait(self):
        self.assertEqual(self.targets("User", DependencyKind.IMPLEMENTS), ["Greeter"])
        self.assertEqual(self.targets("User", DependencyKind.USES_TYPE), ["Profile"])

    def test_trait_extends_bound(self):
        self.assertEqual(self.targets("Greeter", DependencyKind.EXTENDS), ["Named"])
        self.assertEqual(self.targets("Greeter", DependencyKind.USES_TYPE), [])


class TestGoCallGraph(CallGraphTestCase):
    source = GO_SOURCE
    file_path = "shop/order.go"
    language = "go"

    def test_method_calls(self):
        calls = {d.target: d for d in self.deps("Order.Total", DependencyKind.CALLS)}
        self.assertTrue(calls["price"].optional)
        self.assertEqual(calls["price"].to_id, self.entity("price").id)
        self.assertNotIn("len", calls)

    def test_receiver_owner(self):
        self.assertEqual(self.targets("Order.Total", DependencyKind.METHOD_OF), ["Order"])
        self.assertEqual(self.deps("NewOrder", DependencyKind.METHOD_OF), [])

    def test_composite_literal(self):
        calls = {d.target: d for d in self.deps("NewOrder", DependencyKind.CALLS)}
        self.assertEqual(calls["Order"].to_id, self.entity("Order").id)
        self.assertEqual(calls["o.Total"].to_id, self.entity("Order.Total").id)

    def test_struct_embedding(self):
        self.assertEqual(self.targets("Order", DependencyKind.EXTENDS), ["Base"])
        self.assertEqual(self.targets("Order", DependencyKind.USES_TYPE), ["Item"])

    def test_interface_embedding(self):
        self.assertEqual(self.targets("Store", DependencyKind.EXTENDS), ["Reader"])
        self.assertEqual(self.targets("Store", DependencyKind.USES_TYPE), ["Order"])

    def test_builtin_types_filtered(self):
        self.assertEqual(self.targets("price", DependencyKind.USES_TYPE), ["Item"])
        self.assertEqual(self.targets("NewOrder", DependencyKind.USES_TYPE), ["Order"])


class TestGoMultipleEmbedding(CallGraphTestCase):
    source = "package shop\n\ntype Named struct{}\n\ntype Stamped struct{}\n\ntype Item struct {\n\tNamed\n\tStamped\n\tQty int\n}\n"
    file_path = "shop/item.go"
    language = "go"

    def test_every_embedded_type_is_extended(self):
        self.assertEqual(self.targets("Item", DependencyKind.EXTENDS), ["Named", "Stamped"])
        self.assertEqual(self.targets("Item", DependencyKind.IMPLEMENTS), [])


class TestJavaTypeVariables(CallGraphTestCase):
    source = """class Box<T> {
    private T value;
    private Label label;

    public T get(T fallback) {
        return fallback;
    }

    public <R> R map(Mapper<T, R> mapper) {
        return mapper.apply(value);
    }
}
"""
    file_path = "Box.java"
    language = "java"

    def test_class_type_variable_is_not_a_type_use(self):
        self.assertEqual(self.targets("Box", DependencyKind.USES_TYPE), ["Label"])
        self.assertEqual(self.targets("Box.get", DependencyKind.USES_TYPE), [])

    def test_method_type_variable_is_not_a_type_use(self):
        self.assertEqual(self.targets("Box.map", DependencyKind.USES_TYPE), ["Mapper"])


class TestExtractorErrors(unittest.TestCase):
    """Invalid trees abort one unit; incomplete entities contribute nothing."""

    def test_missing_tree(self):
        extractor = CallGraphExtractor(ParseResult(None, None, "x.java", "java"), JavaAdapter(), SymbolResolver([]))
        with self.assertRaises(InvalidTreeError):
            extractor.extract([])

    def test_entity_without_node_or_body(self):
        parser = JavaParser()
        result = parser.parse_source("interface Shape { double area(); }", "Shape.java")
        parsed = parser.extract_entities(result)
        views = [p.entity.to_call_graph_entity(p.node) for p in parsed]
        views.append(parsed[0].entity.to_call_graph_entity(None))

        deps = CallGraphExtractor(result, parser.adapter, SymbolResolver(views)).extract(views)
        self.assertEqual([d.kind for d in deps], [DependencyKind.METHOD_OF])


if __name__ == "__main__":
    unittest.main()
