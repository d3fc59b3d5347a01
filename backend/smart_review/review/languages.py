# smart_review/review/languages.py
"""
Supported review languages: display label and the starter snippet the editor
shows when the language is picked.
"""
from typing import Dict, List

from smart_review.models import Language, LanguageInfo

LABELS: Dict[Language, str] = {
    Language.javascript: "JavaScript",
    Language.python: "Python",
    Language.java: "Java",
    Language.csharp: "C#",
    Language.markup: "HTML",
    Language.php: "PHP",
    Language.ruby: "Ruby",
    Language.go: "Go",
    Language.typescript: "TypeScript",
}

TEMPLATES: Dict[Language, str] = {
    Language.javascript: """function sum(a, b) {
  return a + b;
}""",
    Language.python: """def sum(a, b):
    return a + b""",
    Language.java: """public class Main {
    public static int sum(int a, int b) {
        return a + b;
    }

    public static void main(String[] args) {
        System.out.println(sum(1, 1));
    }
}""",
    Language.csharp: """using System;

public class Program {
    public static int Sum(int a, int b) {
        return a + b;
    }

    public static void Main() {
        Console.WriteLine(Sum(1, 1));
    }
}""",
    Language.markup: """<div class="example">
  <h1>Hello World</h1>
  <p>This is an example of HTML markup</p>
  <ul>
    <li>Item 1</li>
    <li>Item 2</li>
    <li>Item 3</li>
  </ul>
</div>""",
    Language.php: """<?php
function sum($a, $b) {
    return $a + $b;
}

echo sum(1, 1);
?>""",
    Language.ruby: """def sum(a, b)
  a + b
end

puts sum(1, 1)""",
    Language.go: """package main

import "fmt"

func sum(a, b int) int {
    return a + b
}

func main() {
    fmt.Println(sum(1, 1))
}""",
    Language.typescript: """function sum(a: number, b: number): number {
  return a + b;
}

console.log(sum(1, 1));""",
}


def list_languages() -> List[LanguageInfo]:
    return [
        LanguageInfo(id=lang.value, label=LABELS[lang], template=TEMPLATES[lang])
        for lang in Language
    ]
